"""Errors raised by node-arrange."""

from __future__ import annotations


class LayoutContractError(TypeError):
    """An argument passed to the layout engine has the wrong shape or type.

    Raised for caller bugs only. Anomalies in otherwise well-formed graph data
    (dangling edges, cycles, duplicates) are resolved by the engine instead.
    """
