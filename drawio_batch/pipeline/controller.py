"""
流水线控制器 - 编排整次导出

职责：
1. 读取并解析输入文档（在启动引擎之前）
2. 持有唯一的渲染会话，按索引顺序逐图执行 渲染→测量→输出→清理
3. 错误处理：
   - 读取/解析/引擎启动/渲染/边界错误：中止剩余图表，运行失败
   - 写文件错误：记录到该图结果，继续下一张；运行结束时汇总为失败
4. 无论成败引擎都会关闭（会话以 with 持有）

测试要点：
- test_multi_diagram_run: 多图逐一输出
- test_render_timeout_closes_session: 渲染超时仍关闭引擎
- test_write_failure_continues: 写失败不影响其他图
- test_malformed_document_no_engine: 文档非法时不启动引擎
"""

from __future__ import annotations

import logging
from typing import Callable

from ..config import RuntimeConfig, get_config
from ..export import (
    DiagramExtractor,
    RenderSession,
    compute_viewport,
    plan_output,
    select_emitter,
)
from ..interfaces import (
    DrawioBatchError,
    FileWriteError,
    IDiagramExtractor,
    InputReadError,
    InvalidOptionError,
    IRenderSession,
    MalformedDocumentError,
)
from ..models import (
    DiagramContext,
    DiagramDescriptor,
    DiagramOutcome,
    DiagramStatus,
    InputDocument,
    OutputTarget,
    RenderRequest,
    RunConfig,
    RunReport,
)
from .states import DIAGRAM_STAGES, RunState

logger = logging.getLogger(__name__)

SessionFactory = Callable[[RuntimeConfig], IRenderSession]


class ExportPipeline:
    """流水线控制器"""

    def __init__(
        self,
        run_config: RunConfig,
        runtime_config: RuntimeConfig | None = None,
        session_factory: SessionFactory | None = None,
        extractor: IDiagramExtractor | None = None,
    ):
        self.run_config = run_config
        self.config = runtime_config or get_config()
        self.session_factory = session_factory or RenderSession
        self.extractor = extractor or DiagramExtractor()

    def run(self) -> RunReport:
        """执行导出，返回运行报告（退出码见 report.exit_code）"""
        report = RunReport(
            input_path=self.run_config.input_path,
            output_path=self.run_config.output_path,
        )
        report.mark_running(RunState.LOADING.value)

        try:
            document = self._load_document()
            descriptors = self.extractor.extract(document.text)
            report.diagram_count = len(descriptors)
            indices = self._select_indices(descriptors)

            if not indices:
                logger.warning(f"文档中没有图表，未生成任何文件: {document.path}")
                report.mark_succeeded()
                return report

            # 扩展名不受支持时在启动引擎前失败
            select_emitter(self._plan(indices[0], len(descriptors)).extension)

            self._set_state(report, RunState.ENGINE_STARTING)
            with self.session_factory(self.config) as session:
                self._export_all(session, document, indices, len(descriptors), report)
                self._set_state(report, RunState.ENGINE_CLOSING)

        except DrawioBatchError as e:
            logger.error(f"导出失败: {e}")
            report.mark_failed(str(e))
            return report
        except Exception as e:
            logger.exception(f"导出异常终止: {e}")
            report.mark_failed(str(e))
            return report

        if report.failed_outcomes:
            report.mark_failed(report.summary())
            logger.error(f"导出完成但有失败: {report.summary()}")
        else:
            report.mark_succeeded()
            logger.info(f"导出完成: {report.summary()}")
        return report

    def _load_document(self) -> InputDocument:
        """读取输入文档"""
        path = self.run_config.input_path
        try:
            text = path.read_text(encoding="utf-8-sig")
        except UnicodeDecodeError as e:
            raise MalformedDocumentError(f"输入文档不是UTF-8文本: {path}") from e
        except OSError as e:
            raise InputReadError(f"无法读取输入文件: {path}: {e}") from e
        return InputDocument(path=path, text=text)

    def _select_indices(self, descriptors: list[DiagramDescriptor]) -> list[int]:
        """确定要导出的图表索引（指定 diagram_id 时只导出该图）"""
        diagram_id = self.run_config.diagram_id
        if diagram_id is None:
            return [d.index for d in descriptors]
        if diagram_id >= len(descriptors):
            raise InvalidOptionError(
                f"diagram_id={diagram_id} 超出范围，文档只有{len(descriptors)}张图"
            )
        return [diagram_id]

    def _plan(self, index: int, count: int) -> OutputTarget:
        return plan_output(
            self.run_config.output_path,
            self.run_config.input_path,
            index,
            count,
            self.run_config.format,
        )

    def _export_all(
        self,
        session: IRenderSession,
        document: InputDocument,
        indices: list[int],
        count: int,
        report: RunReport,
    ) -> None:
        """逐图导出；非写文件错误中止剩余图表"""
        for pos, index in enumerate(indices):
            try:
                outcome = self._export_diagram(session, document, index, count, report)
            except DrawioBatchError as e:
                report.add_outcome(
                    DiagramOutcome(index=index, status=DiagramStatus.FAILED, error=str(e))
                )
                for skipped in indices[pos + 1:]:
                    report.add_outcome(
                        DiagramOutcome(index=skipped, status=DiagramStatus.SKIPPED)
                    )
                raise
            report.add_outcome(outcome)

    def _export_diagram(
        self,
        session: IRenderSession,
        document: InputDocument,
        index: int,
        count: int,
        report: RunReport,
    ) -> DiagramOutcome:
        """单张图：渲染 -> 测量 -> 输出 -> 清理"""
        ctx = DiagramContext(
            index=index,
            count=count,
            request=RenderRequest.for_diagram(self.run_config, document.text, index),
            target=self._plan(index, count),
        )
        emitter = select_emitter(ctx.target.extension)
        outcome = DiagramOutcome(index=index, status=DiagramStatus.SUCCEEDED)

        for stage in DIAGRAM_STAGES:
            self._set_state(report, stage.state, f"第{index + 1}/{count}张图 {stage.description}")

            if stage.state == RunState.RENDERING:
                session.render_diagram(ctx.request)

            elif stage.state == RunState.MEASURING:
                ctx.bounds = session.read_completion_bounds()
                ctx.viewport = compute_viewport(ctx.bounds)
                session.set_viewport(ctx.viewport)

            elif stage.state == RunState.EMITTING:
                try:
                    outcome.output_path = emitter.emit(session, ctx, self.run_config.quality)
                except FileWriteError as e:
                    logger.error(f"第{index}张图写文件失败，继续下一张: {e}")
                    outcome.status = DiagramStatus.FAILED
                    outcome.error = str(e)

            elif stage.state == RunState.CLEANING_UP:
                session.cleanup_frame()

        return outcome

    def _set_state(self, report: RunReport, state: RunState, message: str | None = None) -> None:
        report.state = state.value
        logger.debug(message or f"状态: {state.value}")
