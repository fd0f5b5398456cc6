"""
模块接口契约 - 定义各模块的抽象接口

设计原则：
1. 流水线只依赖接口，不直接依赖 Playwright 等具体实现
2. 每个接口定义清晰的输入输出类型
3. 便于单元测试和mock替换（测试中用假渲染会话代替浏览器）

使用方式：
    from drawio_batch.interfaces import IRenderSession

    class FakeSession(IRenderSession):
        def render_diagram(self, request: RenderRequest) -> None:
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import (
        Bounds,
        DiagramContext,
        DiagramDescriptor,
        RenderRequest,
        Viewport,
    )


# ============================================================================
# 图表提取接口
# ============================================================================

class IDiagramExtractor(ABC):
    """图表提取器接口 - 从文档中找出全部图表页"""

    @abstractmethod
    def extract(self, text: str) -> list[DiagramDescriptor]:
        """
        解析文档并按文档顺序返回图表描述

        Args:
            text: 输入文档原文

        Returns:
            图表描述列表（索引连续 0..count-1）

        Raises:
            MalformedDocumentError: 文档无法解析
        """
        ...


# ============================================================================
# 渲染会话接口
# ============================================================================

class IRenderSession(ABC):
    """渲染会话接口 - 一个渲染引擎实例的完整生命周期

    用作上下文管理器：进入时启动引擎，退出时无论成败都关闭引擎。
    """

    @abstractmethod
    def start(self) -> None:
        """
        启动引擎、打开页面、加载渲染入口并等待字体就绪

        Raises:
            EngineStartError: 引擎无法启动或入口页面无法加载
        """
        ...

    @abstractmethod
    def render_diagram(self, request: RenderRequest) -> None:
        """
        调用渲染并阻塞到完成标记出现

        Raises:
            RenderTimeoutError: 完成标记未在等待策略内出现
            RenderError: 渲染脚本报错
        """
        ...

    @abstractmethod
    def read_completion_bounds(self) -> Bounds:
        """
        读取完成标记上的 bounds 属性

        Raises:
            InvalidBoundsError: 属性缺失或无法解析
        """
        ...

    @abstractmethod
    def set_viewport(self, viewport: Viewport) -> None:
        """按计算出的视口调整页面尺寸"""
        ...

    @abstractmethod
    def capture_output(
        self,
        kind: str,
        viewport: Viewport,
        clip: Bounds,
        quality: int | None = None,
    ) -> bytes:
        """
        从页面截取输出

        Args:
            kind: pdf / svg / png / jpeg
            viewport: 视口（pdf 页面尺寸）
            clip: 截图裁剪区域（位图）
            quality: 有损压缩质量（仅 jpeg 生效）

        Returns:
            编码后的字节
        """
        ...

    @abstractmethod
    def cleanup_frame(self) -> None:
        """移除完成标记和渲染结果节点（下一张图渲染前必须调用）"""
        ...

    @abstractmethod
    def close(self) -> None:
        """释放引擎（每次运行恰好一次）"""
        ...

    def __enter__(self) -> IRenderSession:
        try:
            self.start()
        except BaseException:
            self.close()
            raise
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


# ============================================================================
# 格式输出接口
# ============================================================================

class IFormatEmitter(ABC):
    """格式输出器接口 - 从已渲染的会话产出一个文件"""

    kind: str

    @abstractmethod
    def emit(self, session: IRenderSession, ctx: DiagramContext, quality: int) -> Path:
        """
        截取输出并写入 ctx.target 指定的文件

        Returns:
            写出的文件路径

        Raises:
            FileWriteError: 写文件失败
        """
        ...


# ============================================================================
# 异常定义
# ============================================================================

class DrawioBatchError(Exception):
    """基础异常"""
    pass


class InvalidOptionError(DrawioBatchError, ValueError):
    """选项值非法"""
    pass


class InputReadError(DrawioBatchError):
    """输入文件读取失败"""
    pass


class MalformedDocumentError(DrawioBatchError):
    """文档无法解析"""
    pass


class EngineStartError(DrawioBatchError):
    """渲染引擎启动失败"""
    pass


class RenderError(DrawioBatchError):
    """渲染失败"""
    pass


class RenderTimeoutError(RenderError):
    """渲染完成标记未出现"""
    pass


class InvalidBoundsError(DrawioBatchError):
    """边界数据缺失或非法"""
    pass


class FileWriteError(DrawioBatchError):
    """输出文件写入失败"""
    pass
