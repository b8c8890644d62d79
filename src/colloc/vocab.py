"""Type table utilities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence


@dataclass(frozen=True)
class TypeTable:
    """Maps token ids to their text form.

    Ids are 1-based: id ``i`` is ``types[i - 1]``. Id 0 is the boundary
    sentinel and never resolves to a type.
    """

    types: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "types", tuple(self.types))
        seen = set()
        for t in self.types:
            if not t:
                raise ValueError("Empty type in type table.")
            if t in seen:
                raise ValueError(f"Duplicate type: {t}")
            seen.add(t)

    def __len__(self) -> int:
        return len(self.types)

    def type_for(self, idx: int) -> str:
        if idx < 1 or idx > len(self.types):
            raise KeyError(f"Token id not in type table: {idx}")
        return self.types[idx - 1]

    def label(self, idx: int) -> str:
        """Type text for `idx`, or the id itself when the table has no entry."""
        idx = int(idx)
        return self.types[idx - 1] if 0 < idx <= len(self.types) else str(idx)

    def id_for(self, token: str) -> int:
        mapping = self.type_to_id()
        if token not in mapping:
            raise KeyError(f"Type not in type table: {token}")
        return mapping[token]

    def type_to_id(self) -> dict[str, int]:
        return {t: i + 1 for i, t in enumerate(self.types)}

    def ids(self) -> range:
        return range(1, len(self.types) + 1)

    def resolve(self, ids: Sequence[int]) -> list[str]:
        return [self.type_for(int(i)) for i in ids]

    def encode(self, tokens: Iterable[str]) -> list[int]:
        mapping = self.type_to_id()
        return [mapping[t] for t in tokens]

    def feature_ids(self, tokens: Iterable[str]) -> set[int]:
        """Ids of the given types; types missing from the table are ignored."""
        mapping = self.type_to_id()
        return {mapping[t] for t in tokens if t in mapping}

    def to_dict(self) -> dict[str, object]:
        return {"types": list(self.types)}

    @classmethod
    def from_dict(cls, payload: dict[str, object]) -> "TypeTable":
        return cls(types=tuple(payload.get("types", [])))

    @classmethod
    def from_mapping(cls, mapping: dict[int, str]) -> "TypeTable":
        """Build from an explicit {id: type} mapping with ids 1..n."""
        n = len(mapping)
        if sorted(mapping) != list(range(1, n + 1)):
            raise ValueError("Type ids must be contiguous and start at 1.")
        return cls(types=tuple(mapping[i] for i in range(1, n + 1)))
