"""
运行模型 - 一次调用的不可变参数与逐图上下文

对应关系：
- RunConfig: 命令行选项（整个运行期间只读）
- InputDocument: 输入文档原文
- DiagramDescriptor: 文档内的一张图（仅索引）
- RenderRequest: 一次渲染调用的参数
- OutputTarget: 一张图的输出文件
- DiagramContext: 单张图在 渲染→测量→输出→清理 各阶段间传递的上下文
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

from .geometry import Bounds, Viewport

OutputFormat = Literal["pdf", "svg", "gif", "png", "jpeg", "bmp", "ppm"]

OUTPUT_FORMATS: tuple[str, ...] = ("pdf", "svg", "gif", "png", "jpeg", "bmp", "ppm")


class FitBounds(BaseModel):
    """适配尺寸约束（0x0 表示不约束）"""
    width: float = Field(0, ge=0)
    height: float = Field(0, ge=0)

    model_config = {"frozen": True}


class RunConfig(BaseModel):
    """调用参数（不可变）"""
    input_path: Path
    output_path: Path
    format: OutputFormat = "pdf"
    quality: int = Field(75, ge=1, le=100, description="有损位图质量")
    scale: float = Field(1.0, gt=0, description="渲染缩放")
    bounds: FitBounds = Field(default_factory=FitBounds)
    diagram_id: int | None = Field(None, ge=0, description="只导出指定图（None=全部）")

    model_config = {"frozen": True}


class InputDocument(BaseModel):
    """输入文档"""
    path: Path
    text: str

    model_config = {"frozen": True}


class DiagramDescriptor(BaseModel):
    """文档内的一张图"""
    index: int = Field(..., ge=0)

    model_config = {"frozen": True}


class RenderRequest(BaseModel):
    """渲染请求（每张图构造一次，只消费一次）"""
    xml: str
    format: str
    scale: float
    bounding_width: float = 0
    bounding_height: float = 0
    diagram_index: int = Field(..., ge=0)

    model_config = {"frozen": True}

    @classmethod
    def for_diagram(cls, config: RunConfig, xml: str, index: int) -> RenderRequest:
        return cls(
            xml=xml,
            format=config.format,
            scale=config.scale,
            bounding_width=config.bounds.width,
            bounding_height=config.bounds.height,
            diagram_index=index,
        )

    def to_engine_params(self) -> dict[str, Any]:
        """渲染页 render() 的参数对象"""
        return {
            "xml": self.xml,
            "format": self.format,
            "scale": self.scale,
            "w": self.bounding_width,
            "h": self.bounding_height,
            "from": self.diagram_index,
        }


class OutputTarget(BaseModel):
    """输出目标（基础路径+扩展名）"""
    base: str = Field(..., description="不含扩展名的路径")
    extension: str
    is_multi_diagram: bool = False

    model_config = {"frozen": True}

    @property
    def filename(self) -> str:
        return f"{self.base}.{self.extension}"

    @property
    def path(self) -> Path:
        return Path(self.filename)


class DiagramContext(BaseModel):
    """单张图的阶段上下文（不跨迭代共享）"""
    index: int
    count: int
    request: RenderRequest
    target: OutputTarget
    bounds: Bounds | None = None
    viewport: Viewport | None = None
