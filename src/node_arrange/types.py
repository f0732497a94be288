"""Shared type definitions for node-arrange.

Enums used across the graph model, layout phases, and the CLI.
"""

from __future__ import annotations

from enum import Enum


class Direction(Enum):
    HORIZONTAL = "horizontal"  # flow left → right
    VERTICAL = "vertical"  # flow top → bottom

    @classmethod
    def default(cls) -> Direction:
        return cls.HORIZONTAL

    @classmethod
    def parse(cls, value: object) -> Direction:
        """Resolve a Direction from the enum itself or its string spelling."""
        if isinstance(value, Direction):
            return value
        if isinstance(value, str):
            key = value.strip().upper()
            if key in _DIRECTION_ALIASES:
                return _DIRECTION_ALIASES[key]
        raise ValueError(f"Unknown direction {value!r}; use 'horizontal' or 'vertical'")


_DIRECTION_ALIASES: dict[str, Direction] = {
    "HORIZONTAL": Direction.HORIZONTAL,
    "LR": Direction.HORIZONTAL,
    "RIGHT": Direction.HORIZONTAL,
    "VERTICAL": Direction.VERTICAL,
    "TD": Direction.VERTICAL,
    "TB": Direction.VERTICAL,
    "DOWN": Direction.VERTICAL,
}


class PortSide(Enum):
    INPUT = "input"
    OUTPUT = "output"

    @classmethod
    def parse(cls, value: object) -> PortSide:
        if isinstance(value, PortSide):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            if key in ("input", "in", "target"):
                return cls.INPUT
            if key in ("output", "out", "source"):
                return cls.OUTPUT
        raise ValueError(f"Unknown port side {value!r}; use 'input' or 'output'")
