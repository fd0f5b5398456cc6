"""
日志配置 - 按运行期配置安装日志处理器
"""

from __future__ import annotations

import logging

from .runtime_config import LoggingConfig

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(cfg: LoggingConfig, level: str | None = None) -> None:
    """配置根日志器

    Args:
        cfg: 日志配置
        level: 命令行指定的级别（优先于配置）
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if cfg.log_to_file:
        handlers.append(logging.FileHandler(cfg.log_file, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, (level or cfg.log_level).upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
