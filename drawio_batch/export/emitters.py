"""
格式输出器 - 按输出扩展名选择 pdf / svg / 位图 三类输出

职责：
1. select_emitter: 由最终扩展名（不是 --format）选择输出器
2. 共享引擎截取（RenderSession.capture_output），各类只做自己的后处理
3. 每张图恰好写一个文件，写失败抛 FileWriteError

依赖：
- Pillow: 浏览器只能直接产出 png/jpeg，gif/bmp/ppm 由 png 转码

测试要点：
- test_select_emitter: 扩展名分派
- test_unknown_extension: 不支持的扩展名
- test_raster_transcode: gif/bmp/ppm 转码
- test_write_failure: 写失败 -> FileWriteError
"""

from __future__ import annotations

import io
import logging
from abc import abstractmethod
from pathlib import Path

from PIL import Image

from ..interfaces import (
    FileWriteError,
    IFormatEmitter,
    InvalidOptionError,
    IRenderSession,
    RenderError,
)
from ..models import DiagramContext

logger = logging.getLogger(__name__)

BROWSER_RASTER_FORMATS = ("png", "jpeg")
TRANSCODED_RASTER_FORMATS = {"gif": "GIF", "bmp": "BMP", "ppm": "PPM"}
RASTER_FORMATS = BROWSER_RASTER_FORMATS + tuple(TRANSCODED_RASTER_FORMATS)
LOSSY_FORMATS = ("jpeg",)

EXTENSION_ALIASES = {"jpg": "jpeg"}


class FormatEmitter(IFormatEmitter):
    """输出器基类：截取 -> 写文件"""

    kind: str = ""

    def emit(self, session: IRenderSession, ctx: DiagramContext, quality: int) -> Path:
        if ctx.bounds is None or ctx.viewport is None:
            raise RenderError(f"第{ctx.index}张图尚未测量，无法输出")
        data = self.capture(session, ctx, quality)
        return write_output(ctx.target.path, data)

    @abstractmethod
    def capture(self, session: IRenderSession, ctx: DiagramContext, quality: int) -> bytes:
        """产出编码后的字节"""
        ...


class PdfEmitter(FormatEmitter):
    """分页文档输出"""

    kind = "pdf"

    def capture(self, session: IRenderSession, ctx: DiagramContext, quality: int) -> bytes:
        return session.capture_output("pdf", ctx.viewport, ctx.bounds)


class SvgEmitter(FormatEmitter):
    """矢量输出（独立 SVG 文档）"""

    kind = "svg"

    def capture(self, session: IRenderSession, ctx: DiagramContext, quality: int) -> bytes:
        return session.capture_output("svg", ctx.viewport, ctx.bounds)


class RasterEmitter(FormatEmitter):
    """位图输出（按内容边界裁剪）"""

    kind = "raster"

    def __init__(self, image_format: str):
        if image_format not in RASTER_FORMATS:
            raise InvalidOptionError(f"不支持的位图格式: {image_format}")
        self.image_format = image_format

    def capture(self, session: IRenderSession, ctx: DiagramContext, quality: int) -> bytes:
        if self.image_format in BROWSER_RASTER_FORMATS:
            lossy_quality = quality if self.image_format in LOSSY_FORMATS else None
            return session.capture_output(
                self.image_format, ctx.viewport, ctx.bounds, lossy_quality
            )

        png = session.capture_output("png", ctx.viewport, ctx.bounds)
        return transcode_png(png, self.image_format)


def transcode_png(png: bytes, image_format: str) -> bytes:
    """png 转为 gif / bmp / ppm"""
    pil_format = TRANSCODED_RASTER_FORMATS[image_format]
    with Image.open(io.BytesIO(png)) as img:
        converted = img.convert("RGB")
        buf = io.BytesIO()
        converted.save(buf, format=pil_format)
    return buf.getvalue()


def normalize_extension(extension: str) -> str:
    ext = extension.lower().lstrip(".")
    return EXTENSION_ALIASES.get(ext, ext)


def select_emitter(extension: str) -> FormatEmitter:
    """由输出扩展名选择输出器"""
    ext = normalize_extension(extension)
    if ext == "pdf":
        return PdfEmitter()
    if ext == "svg":
        return SvgEmitter()
    if ext in RASTER_FORMATS:
        return RasterEmitter(ext)
    raise InvalidOptionError(f"不支持的输出扩展名: {extension!r}")


def write_output(path: Path, data: bytes) -> Path:
    """写出文件（父目录不存在时创建）"""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as e:
        raise FileWriteError(f"写入失败: {path}: {e}") from e

    logger.info(f"已写出: {path} ({len(data)} 字节)")
    return path
