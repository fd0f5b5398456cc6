"""
命令行入口 - drawio-batch [options] <input> <output>

示例：
  # 导出为 PDF（多页文档生成 out.0.pdf, out.1.pdf ...）
  drawio-batch diagram.drawio out.pdf

  # 输出到目录，按 --format 决定扩展名
  drawio-batch -f png diagram.drawio exports/

  # 只导出第3张图，放大2倍并限制在 800x600 内
  drawio-batch -d 2 -s 2 -b 800x600 diagram.drawio page.png
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path

from . import __version__
from .config import configure_logging, get_config, reload_config
from .interfaces import InvalidOptionError
from .models import OUTPUT_FORMATS, FitBounds, RunConfig
from .pipeline import ExportPipeline

logger = logging.getLogger(__name__)


def parse_quality(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise InvalidOptionError(f"质量参数无效: {value!r}") from None
    if number <= 0 or number > 100:
        raise InvalidOptionError(f"质量参数需在 1..100 之间: {value!r}")
    return number


def parse_scale(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise InvalidOptionError(f"缩放参数无效: {value!r}") from None
    if not number > 0:
        raise InvalidOptionError(f"缩放参数必须为正数: {value!r}")
    return number


def parse_bounds(value: str) -> FitBounds:
    parts = value.lower().split("x")
    if len(parts) != 2:
        raise InvalidOptionError(f"尺寸必须是两个数 WxH: {value!r}")
    try:
        width, height = (float(p) for p in parts)
    except ValueError:
        raise InvalidOptionError(f"尺寸无效: {value!r}") from None
    if not (width > 0 and height > 0):
        raise InvalidOptionError(f"尺寸必须为正数: {value!r}")
    return FitBounds(width=width, height=height)


def parse_diagram_id(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise InvalidOptionError(f"图表索引无效: {value!r}") from None
    if number < 0:
        raise InvalidOptionError(f"图表索引不能为负: {value!r}")
    return number


def _option_type(parse):
    """把 InvalidOptionError 转为 argparse 可展示的错误信息"""

    def convert(value: str):
        try:
            return parse(value)
        except InvalidOptionError as e:
            raise argparse.ArgumentTypeError(str(e)) from e

    convert.__name__ = parse.__name__
    return convert


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="drawio-batch",
        description="批量导出 draw.io 文档中的全部图表",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("示例：", 1)[1] if __doc__ else None,
    )
    parser.add_argument("input", help="输入的 draw.io 文档")
    parser.add_argument("output", help="输出文件路径或已存在的目录")
    parser.add_argument(
        "-f", "--format",
        choices=OUTPUT_FORMATS,
        default="pdf",
        help="输出为目录时使用的扩展名，同时作为渲染提示（默认：pdf）",
    )
    parser.add_argument(
        "-q", "--quality",
        type=_option_type(parse_quality),
        default=75,
        help="JPEG 输出质量 1..100（默认：75）",
    )
    parser.add_argument(
        "-s", "--scale",
        type=_option_type(parse_scale),
        default=1.0,
        help="位图输出缩放（默认：1.0）",
    )
    parser.add_argument(
        "-b", "--bounds",
        type=_option_type(parse_bounds),
        default=FitBounds(),
        metavar="WxH",
        help="保持比例适配到指定尺寸内，例如 800x600",
    )
    parser.add_argument(
        "-d", "--diagram-id", "--diagramId",
        dest="diagram_id",
        type=_option_type(parse_diagram_id),
        default=None,
        help="只导出指定索引的图（默认：全部）",
    )
    parser.add_argument(
        "-c", "--config",
        default=None,
        help="运行期配置 YAML（默认：config/drawio_batch.yaml）",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="日志级别（默认取配置，INFO）",
    )
    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def _raise_system_exit(signum, frame) -> None:
    # 让 with 块正常退出，浏览器随之关闭
    raise SystemExit(128 + signum)


def main(argv: list[str] | None = None) -> int:
    """命令行主入口，返回退出码"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.config and not Path(args.config).is_file():
        parser.error(f"配置文件不存在: {args.config}")
    config = reload_config(args.config) if args.config else get_config()
    configure_logging(config.logging, args.log_level)

    signal.signal(signal.SIGTERM, _raise_system_exit)

    run_config = RunConfig(
        input_path=Path(args.input),
        output_path=Path(args.output),
        format=args.format,
        quality=args.quality,
        scale=args.scale,
        bounds=args.bounds,
        diagram_id=args.diagram_id,
    )

    try:
        report = ExportPipeline(run_config, runtime_config=config).run()
    except KeyboardInterrupt:
        logger.info("已中断")
        return 1

    for outcome in report.failed_outcomes:
        logger.error(f"第{outcome.index}张图失败: {outcome.error}")
    return report.exit_code


if __name__ == "__main__":
    sys.exit(main())
