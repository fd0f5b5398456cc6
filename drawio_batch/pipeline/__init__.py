"""
流水线模块 - 运行编排

子模块：
- states: 运行状态与单图阶段定义
- controller: 流水线控制器
"""

from .controller import ExportPipeline
from .states import DIAGRAM_STAGES, DiagramStage, RunState

__all__ = [
    "ExportPipeline",
    "RunState",
    "DiagramStage",
    "DIAGRAM_STAGES",
]
