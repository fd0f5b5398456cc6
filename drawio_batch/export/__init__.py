"""
导出模块 - 单张图的提取/渲染/测量/命名/输出

子模块：
- extractor: 图表提取（数量与索引）
- render_session: 渲染会话（Playwright + draw.io 渲染页）
- geometry: 边界 -> 视口
- planner: 输出文件名规划
- svg: 独立 SVG 转换
- emitters: pdf / svg / 位图 输出器
"""

from .emitters import (
    FormatEmitter,
    PdfEmitter,
    RasterEmitter,
    SvgEmitter,
    select_emitter,
    write_output,
)
from .extractor import DiagramExtractor
from .geometry import compute_viewport
from .planner import plan_output
from .render_session import RenderSession
from .svg import to_standalone_svg

__all__ = [
    "DiagramExtractor",
    "RenderSession",
    "compute_viewport",
    "plan_output",
    "to_standalone_svg",
    "FormatEmitter",
    "PdfEmitter",
    "SvgEmitter",
    "RasterEmitter",
    "select_emitter",
    "write_output",
]
