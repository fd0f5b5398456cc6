"""
数据模型层 - 定义系统核心数据结构

所有模块通过这些模型交互，实现解耦：
- RunConfig / RenderRequest / OutputTarget: 不可变参数
- Bounds / Viewport: 几何
- DiagramContext: 单张图的阶段上下文
- RunReport: 运行状态与逐图结果
"""

from .geometry import Bounds, Viewport
from .report import DiagramOutcome, DiagramStatus, RunReport, RunStatus
from .run import (
    OUTPUT_FORMATS,
    DiagramContext,
    DiagramDescriptor,
    FitBounds,
    InputDocument,
    OutputFormat,
    OutputTarget,
    RenderRequest,
    RunConfig,
)

__all__ = [
    "Bounds",
    "Viewport",
    "RunConfig",
    "FitBounds",
    "InputDocument",
    "DiagramDescriptor",
    "RenderRequest",
    "OutputTarget",
    "OutputFormat",
    "OUTPUT_FORMATS",
    "DiagramContext",
    "DiagramOutcome",
    "DiagramStatus",
    "RunReport",
    "RunStatus",
]
