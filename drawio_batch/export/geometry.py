"""
几何解析 - 由引擎上报的边界计算输出视口
"""

from __future__ import annotations

import math

from ..interfaces import InvalidBoundsError
from ..models import Bounds, Viewport


def compute_viewport(bounds: Bounds) -> Viewport:
    """视口 = ceil(x + width) × ceil(y + height)，至少 1×1"""
    values = (bounds.x, bounds.y, bounds.width, bounds.height)
    if not all(math.isfinite(v) for v in values):
        raise InvalidBoundsError(f"边界含非有限值: {bounds.model_dump()}")

    width = math.ceil(bounds.right)
    height = math.ceil(bounds.bottom)
    return Viewport(width=max(1, width), height=max(1, height))
