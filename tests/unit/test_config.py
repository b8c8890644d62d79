import pytest

from colloc.config import CollocationConfig, SequenceConfig, config_section, load_config
from colloc.errors import ConfigurationError
from colloc.scoring.measures import Measure


def test_defaults():
    cfg = CollocationConfig()
    assert cfg.sizes == (2,)
    assert cfg.min_count == 1
    assert cfg.epsilon == 1e-9
    assert cfg.measures == (Measure.LR,)
    seq = SequenceConfig()
    assert seq.min_count == 2
    assert seq.method == "lambda"


@pytest.mark.parametrize("sizes", [(1,), (4,), (2, 5)])
def test_unsupported_collocation_size(sizes):
    with pytest.raises(ConfigurationError):
        CollocationConfig(sizes=sizes)


def test_unsupported_sequence_size():
    SequenceConfig(sizes=(2, 3, 4, 5))
    with pytest.raises(ConfigurationError):
        SequenceConfig(sizes=(6,))


def test_method_all_ranks_by_g2():
    cfg = CollocationConfig(method="all")
    assert cfg.primary is Measure.LR
    assert [m.column for m in cfg.measures] == ["G2", "X2", "pmi", "dice"]


def test_invalid_values():
    with pytest.raises(ConfigurationError):
        CollocationConfig(min_count=-1)
    with pytest.raises(ConfigurationError):
        CollocationConfig(epsilon=0)
    with pytest.raises(ConfigurationError):
        CollocationConfig(method="t")
    with pytest.raises(ConfigurationError):
        SequenceConfig(method="lambda2")


def test_roundtrip_json():
    cfg = CollocationConfig(sizes=(2, 3), method="pmi", min_count=3)
    assert CollocationConfig.from_json(cfg.to_json()) == cfg
    seq = SequenceConfig(sizes=(2, 3), method="lambda1")
    assert SequenceConfig.from_dict(seq.to_dict()) == seq


def test_load_yaml_sections(tmp_path):
    path = tmp_path / "colloc.yaml"
    path.write_text("collocations:\n  sizes: [2, 3]\n  method: chi2\nsequences:\n  min_count: 4\n", encoding="utf-8")
    payload = load_config(str(path))
    cfg = CollocationConfig.from_dict(config_section(payload, "collocations"))
    assert cfg.sizes == (2, 3)
    assert cfg.method == "chi2"
    assert SequenceConfig.from_dict(config_section(payload, "sequences")).min_count == 4


def test_load_config_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))
    assert load_config(None) == {}
