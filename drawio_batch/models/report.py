"""
运行报告模型 - 运行状态、逐图结果与退出码
"""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class RunStatus(str, Enum):
    """运行状态枚举"""
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class DiagramStatus(str, Enum):
    """单张图结果"""
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


class DiagramOutcome(BaseModel):
    """单张图的导出结果"""
    index: int
    output_path: Path | None = None
    status: DiagramStatus
    error: str | None = None


class RunReport(BaseModel):
    """一次运行的报告"""
    run_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    input_path: Path
    output_path: Path

    status: RunStatus = RunStatus.PENDING
    state: str = "INIT"
    diagram_count: int = 0

    outcomes: list[DiagramOutcome] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list, description="错误信息")

    created_at: datetime = Field(default_factory=datetime.now)
    started_at: datetime | None = None
    finished_at: datetime | None = None

    def mark_running(self, state: str = "LOADING") -> None:
        """标记为运行中"""
        self.status = RunStatus.RUNNING
        self.started_at = datetime.now()
        self.state = state

    def mark_succeeded(self) -> None:
        """标记为成功"""
        self.status = RunStatus.SUCCEEDED
        self.finished_at = datetime.now()
        self.state = "DONE"

    def mark_failed(self, error: str) -> None:
        """标记为失败"""
        self.status = RunStatus.FAILED
        self.finished_at = datetime.now()
        self.state = "FAILED"
        self.errors.append(error)

    def add_outcome(self, outcome: DiagramOutcome) -> None:
        self.outcomes.append(outcome)

    @property
    def failed_outcomes(self) -> list[DiagramOutcome]:
        return [o for o in self.outcomes if o.status == DiagramStatus.FAILED]

    @property
    def written_paths(self) -> list[Path]:
        return [
            o.output_path
            for o in self.outcomes
            if o.status == DiagramStatus.SUCCEEDED and o.output_path is not None
        ]

    @property
    def exit_code(self) -> int:
        """0=全部成功，1=有任何失败"""
        if self.status != RunStatus.SUCCEEDED or self.failed_outcomes:
            return 1
        return 0

    def summary(self) -> str:
        done = len(self.written_paths)
        failed = len(self.failed_outcomes)
        return f"共{self.diagram_count}张图，成功{done}，失败{failed}"
