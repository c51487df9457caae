"""Layout configuration: card sizes, gaps and margins."""

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Mapping

import yaml


@dataclass(frozen=True)
class LayoutConfig:
    card_width: float = 240
    card_height: float = 96
    couple_gap: float = 16
    sibling_gap: float = 32
    block_gap: float = 40  # between independent root trees
    row_height: float = 180
    margin: float = 48

    def __post_init__(self):
        for name in ("card_width", "card_height", "row_height"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        for name in ("couple_gap", "sibling_gap", "block_gap", "margin"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative, got {getattr(self, name)}")

    @property
    def couple_width(self) -> float:
        return 2 * self.card_width + self.couple_gap

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "LayoutConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(mapping) - known)
        if unknown:
            raise ValueError(f"Unknown layout option(s): {', '.join(unknown)}")
        values = {}
        for key, value in mapping.items():
            try:
                values[key] = float(value)
            except (TypeError, ValueError):
                raise ValueError(f"Layout option {key} must be a number, got {value!r}") from None
        return cls(**values)

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


DEFAULT_LAYOUT = LayoutConfig()


def load_layout_config(path: str | Path) -> LayoutConfig:
    """
    Load a LayoutConfig from a YAML file.

    The options may sit at the top level or under a ``layout`` key. An empty
    file yields the defaults.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Layout config not found: {path}")

    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Layout config must be a mapping: {path}")
    if "layout" in data:
        data = data["layout"] or {}
        if not isinstance(data, dict):
            raise ValueError(f"'layout' section must be a mapping: {path}")

    return LayoutConfig.from_mapping(data)
