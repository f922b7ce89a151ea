"""
Deterministic meadow layout.

Turns an element count into positioned, scaled, rotated flower descriptors.
Everything about flower `i` is derived from `prf(i)` at fixed offsets, so a
descriptor depends on its index alone: growing or shrinking the count adds
or removes flowers without moving the ones that stay.

Constants (kept exact so other renderers can reproduce the layout):
- prf(i) = frac(sin(i * 12.9898 + 78.233) * 43758.5453)
- x  = 2 + prf(i) * 96            (% of field width)
- y  = 5 + prf(i + 10000) * 90    (% of field height, larger = nearer)
- scale    = 0.4 + (y / 100) * 0.7
- z_index  = floor(y * 10)
- rotation = (prf(i + 20000) - 0.5) * 30   (degrees)
- delay_ms = min(i * 5, 1000)
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import List

PRF_K1 = 12.9898
PRF_K2 = 78.233
PRF_K3 = 43758.5453

Y_OFFSET = 10_000
ROTATION_OFFSET = 20_000

X_MIN, X_SPAN = 2.0, 96.0
Y_MIN, Y_SPAN = 5.0, 90.0
SCALE_MIN, SCALE_SPAN = 0.4, 0.7
ROTATION_SPAN = 30.0
DELAY_STEP_MS = 5
DELAY_CAP_MS = 1000

CAP = 1000
UNIT = 1000


def prf(i: int) -> float:
    """Index-seeded pseudo-random value in [0, 1). Pure and repeatable."""
    x = math.sin(i * PRF_K1 + PRF_K2) * PRF_K3
    r = x - math.floor(x)
    # x a hair below an integer can round up to exactly 1.0
    return r if r < 1.0 else 0.0


def element_count(total: float, unit: int = UNIT) -> int:
    """One element per full `unit` of a non-negative total."""
    if isinstance(total, float) and not math.isfinite(total):
        return 0
    return int(math.floor(max(0, total) / unit))


@dataclass(frozen=True)
class FlowerDescriptor:
    index: int
    x: float
    y: float
    scale: float
    z_index: int
    rotation: float
    delay_ms: int


@dataclass
class MeadowLayout:
    element_count: int
    display_count: int
    overflow: int
    cap: int
    flowers: List[FlowerDescriptor] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "element_count": self.element_count,
            "display_count": self.display_count,
            "overflow": self.overflow,
            "cap": self.cap,
            "flowers": [asdict(f) for f in self.flowers],
        }


def descriptor(i: int) -> FlowerDescriptor:
    r1 = prf(i)
    r2 = prf(i + Y_OFFSET)
    r3 = prf(i + ROTATION_OFFSET)
    x = X_MIN + r1 * X_SPAN
    y = Y_MIN + r2 * Y_SPAN
    return FlowerDescriptor(
        index=i,
        x=x,
        y=y,
        # Depth is the only proxy for distance: scale and stacking follow y
        scale=SCALE_MIN + (y / 100.0) * SCALE_SPAN,
        z_index=int(math.floor(y * 10)),
        rotation=(r3 - 0.5) * ROTATION_SPAN,
        delay_ms=min(i * DELAY_STEP_MS, DELAY_CAP_MS),
    )


def generate_layout(count: int, cap: int = CAP) -> MeadowLayout:
    """Materialize flowers [0, min(count, cap)) sorted back-to-front.

    The returned layout keeps the true `element_count` next to the rendered
    `display_count` so callers can show an overflow notice.
    """
    n = max(0, int(count))
    cap = max(0, int(cap))
    shown = min(n, cap)
    flowers = [descriptor(i) for i in range(shown)]
    flowers.sort(key=lambda f: (f.y, f.index))
    return MeadowLayout(
        element_count=n,
        display_count=shown,
        overflow=n - shown,
        cap=cap,
        flowers=flowers,
    )


def layout_for_total(total: float, unit: int = UNIT, cap: int = CAP) -> MeadowLayout:
    return generate_layout(element_count(total, unit), cap=cap)
