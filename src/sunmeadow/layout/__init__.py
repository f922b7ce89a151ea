"""Deterministic meadow layout generator."""

from .generator import (
    CAP,
    FlowerDescriptor,
    MeadowLayout,
    descriptor,
    element_count,
    generate_layout,
    layout_for_total,
    prf,
)

__all__ = [
    "CAP",
    "FlowerDescriptor",
    "MeadowLayout",
    "descriptor",
    "element_count",
    "generate_layout",
    "layout_for_total",
    "prf",
]
