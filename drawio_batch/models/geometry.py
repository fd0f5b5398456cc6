"""
几何模型 - 引擎上报的内容边界与输出视口
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class Bounds(BaseModel):
    """渲染内容边界（完成标记 bounds 属性）"""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def as_clip(self) -> dict[str, float]:
        """截图裁剪区域"""
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


class Viewport(BaseModel):
    """输出视口（整数像素，至少1）"""
    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)

    model_config = {"frozen": True}

    def as_size(self) -> dict[str, int]:
        return {"width": self.width, "height": self.height}
