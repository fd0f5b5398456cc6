"""
流水线状态定义

状态流转：
    INIT -> LOADING -> ENGINE_STARTING
         -> (RENDERING -> MEASURING -> EMITTING -> CLEANING_UP) × 图表数
         -> ENGINE_CLOSING -> DONE
    除 CLEANING_UP 外任一状态失败 -> FAILED（引擎照常关闭）
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RunState(str, Enum):
    """运行状态枚举"""
    INIT = "INIT"
    LOADING = "LOADING"
    ENGINE_STARTING = "ENGINE_STARTING"
    RENDERING = "RENDERING"
    MEASURING = "MEASURING"
    EMITTING = "EMITTING"
    CLEANING_UP = "CLEANING_UP"
    ENGINE_CLOSING = "ENGINE_CLOSING"
    DONE = "DONE"
    FAILED = "FAILED"


@dataclass(frozen=True)
class DiagramStage:
    """单张图的处理阶段"""
    state: RunState
    description: str


# 每张图依次经过的阶段
DIAGRAM_STAGES: list[DiagramStage] = [
    DiagramStage(RunState.RENDERING, "渲染"),
    DiagramStage(RunState.MEASURING, "测量"),
    DiagramStage(RunState.EMITTING, "输出"),
    DiagramStage(RunState.CLEANING_UP, "清理"),
]
