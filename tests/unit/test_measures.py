import math

import numpy as np
import pytest

from colloc.errors import ConfigurationError
from colloc.scoring.expected import cell_patterns, expected_bigram, expected_trigram, word_totals
from colloc.scoring.measures import Measure, chi_squared, dice, likelihood_ratio, parse_method, pointwise_mutual_information, score

OBS = np.array([[3, 0, 0, 2]])
N = 5


def test_cell_patterns_bigram_order():
    assert cell_patterns(2).tolist() == [[True, True], [True, False], [False, True], [False, False]]


def test_expected_bigram():
    e = expected_bigram(OBS, N)
    assert e[0].tolist() == pytest.approx([1.8, 1.2, 1.2, 0.8])
    assert e.sum() == pytest.approx(N)


def test_expected_trigram_sums_to_n():
    obs = np.array([[2, 1, 0, 3, 1, 0, 4, 9], [1, 0, 0, 0, 0, 0, 0, 19]])
    n = 20
    e = expected_trigram(obs, n)
    assert np.all(e >= 0)
    assert e.sum(axis=1) == pytest.approx([n, n])
    # e111 = c1 * c2 * c3 / N^2
    c1, c2, c3 = word_totals(obs, 3)[0]
    assert e[0, 0] == pytest.approx(c1 * c2 * c3 / n**2)


def test_expected_zero_total_gives_zero_cells():
    e = expected_bigram(np.array([[2, 0, 0, 0]]), 2)
    assert np.all(e >= 0)
    assert e[0, 1] == 0.0
    assert e[0, 3] == 0.0


def test_likelihood_ratio():
    e = expected_bigram(OBS, N)
    values, ok = likelihood_ratio(OBS, e, word_totals(OBS, 2), 1e-9)
    expected = 2 * (3 * math.log(3 / 1.8) + 2 * math.log(2 / 0.8))
    assert values[0] == pytest.approx(expected, rel=1e-6)
    assert ok.all()


def test_chi_squared():
    e = expected_bigram(OBS, N)
    values, ok = chi_squared(OBS, e, word_totals(OBS, 2), 1e-9)
    assert values[0] == pytest.approx(5.0)
    assert ok.all()


def test_chi_squared_undefined_on_zero_expected():
    obs = np.array([[2, 0, 0, 0]])
    e = expected_bigram(obs, 2)
    _, ok = chi_squared(obs, e, word_totals(obs, 2), 1e-9)
    assert not ok[0]
    g2, ok_g2 = likelihood_ratio(obs, e, word_totals(obs, 2), 1e-9)
    assert ok_g2[0]
    assert np.isfinite(g2[0])


def test_pmi_uses_joint_cell_only():
    e = expected_bigram(OBS, N)
    values, _ = pointwise_mutual_information(OBS, e, word_totals(OBS, 2), 1e-9)
    assert values[0] == pytest.approx(math.log(3 / 1.8))


def test_dice_bigram_and_trigram():
    e = expected_bigram(OBS, N)
    values, _ = dice(OBS, e, word_totals(OBS, 2), 1e-9)
    assert values[0] == pytest.approx(1.0)

    obs3 = np.array([[2, 1, 0, 3, 1, 0, 4, 9]])
    totals = word_totals(obs3, 3)
    values3, _ = dice(obs3, expected_trigram(obs3, 20), totals, 1e-9)
    assert values3[0] == pytest.approx(3 * 2 / totals.sum())


def test_all_matches_individual_measures():
    rng = np.random.default_rng(3)
    obs = rng.integers(1, 50, size=(20, 4))
    n = 1000
    obs[:, 3] = n - obs[:, :3].sum(axis=1)
    e = expected_bigram(obs, n)
    totals = word_totals(obs, 2)
    together, _ = score(obs, e, totals, [Measure.ALL])
    for m in (Measure.LR, Measure.CHI2, Measure.PMI, Measure.DICE):
        alone, _ = score(obs, e, totals, [m])
        assert np.array_equal(together[m.column], alone[m.column])


def test_parse_method_aliases():
    assert parse_method("G2") is Measure.LR
    assert parse_method("x2") is Measure.CHI2
    assert Measure.ALL.expand()[0] is Measure.LR
    with pytest.raises(ConfigurationError):
        parse_method("tscore")


def test_score_mask_follows_primary_measure():
    obs = np.array([[2, 0, 0, 0], [3, 0, 0, 2]])
    e = np.vstack([expected_bigram(obs[:1], 2), expected_bigram(obs[1:], 5)])
    values, ok = score(obs, e, word_totals(obs, 2), [Measure.ALL])
    assert ok.tolist() == [True, True]
    assert np.isnan(values["X2"][0])
    assert values["X2"][1] == pytest.approx(5.0)
    _, ok_chi2 = score(obs, e, word_totals(obs, 2), [Measure.ALL], primary=Measure.CHI2)
    assert ok_chi2.tolist() == [False, True]
