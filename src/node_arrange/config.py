"""Centralized configuration for node-arrange."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, fields

from node_arrange.errors import LayoutContractError
from node_arrange.types import Direction

DEFAULT_GAP_X: float = 250
DEFAULT_GAP_Y: float = 120
DEFAULT_NODE_WIDTH: float = 150
DEFAULT_NODE_HEIGHT: float = 50
DEFAULT_MAX_PASSES: int = 4

STRATEGIES: tuple[str, ...] = ("sugiyama", "multipartite")

# camelCase spellings used by the editor front end
_KEY_ALIASES: dict[str, str] = {
    "gapX": "gap_x",
    "gapY": "gap_y",
    "startX": "start_x",
    "startY": "start_y",
    "nodeWidth": "node_width",
    "nodeHeight": "node_height",
    "maxPasses": "max_passes",
}


@dataclass(frozen=True)
class LayoutOptions:
    """Configuration for one arrange call."""

    gap_x: float = DEFAULT_GAP_X
    gap_y: float = DEFAULT_GAP_Y
    direction: Direction = Direction.HORIZONTAL
    start_x: float = 0
    start_y: float = 0
    node_width: float = DEFAULT_NODE_WIDTH
    node_height: float = DEFAULT_NODE_HEIGHT
    max_passes: int = DEFAULT_MAX_PASSES
    strategy: str = "sugiyama"

    def __post_init__(self) -> None:
        for name in ("gap_x", "gap_y", "start_x", "start_y", "node_width", "node_height"):
            _require_number(name, getattr(self, name))
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"{name} must be finite, got {getattr(self, name)!r}")
        for name in ("gap_x", "gap_y"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)!r}")
        for name in ("node_width", "node_height"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)!r}")
        if isinstance(self.max_passes, bool) or not isinstance(self.max_passes, int):
            raise LayoutContractError(f"max_passes must be an int, got {type(self.max_passes).__name__}")
        if self.max_passes < 1:
            raise ValueError(f"max_passes must be at least 1, got {self.max_passes}")
        if not isinstance(self.direction, Direction):
            object.__setattr__(self, "direction", Direction.parse(self.direction))
        if self.strategy not in STRATEGIES:
            raise ValueError(f"Unknown strategy '{self.strategy}'; use one of {', '.join(STRATEGIES)}")

    @classmethod
    def from_mapping(cls, options: Mapping[str, object] | None) -> LayoutOptions:
        """Build options from a caller mapping; unrecognised keys are ignored."""
        if options is None:
            return cls()
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, object] = {}
        for key, value in options.items():
            name = _KEY_ALIASES.get(key, key)
            if name in known and value is not None:
                kwargs[name] = value
        return cls(**kwargs)

    @classmethod
    def coerce(cls, options: object) -> LayoutOptions:
        """Accept None, a mapping, or an existing LayoutOptions."""
        if isinstance(options, LayoutOptions):
            return options
        if options is None or isinstance(options, Mapping):
            return cls.from_mapping(options)
        raise LayoutContractError(f"options must be a mapping or LayoutOptions, got {type(options).__name__}")

    @property
    def is_vertical(self) -> bool:
        return self.direction is Direction.VERTICAL


def _require_number(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise LayoutContractError(f"{name} must be a number, got {type(value).__name__}")
