from __future__ import annotations

from .query import Node, find_one, find_text, inner_text, parse

__all__ = [
    "Node",
    "find_one",
    "find_text",
    "inner_text",
    "parse",
]
