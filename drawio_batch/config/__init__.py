"""
配置层 - 运行期配置与日志

职责：
- 加载 config/drawio_batch.yaml（运行期参数）
- 提供类型安全的配置访问接口
- 安装日志处理器
"""

from .logging_setup import configure_logging
from .runtime_config import LoggingConfig, RuntimeConfig, get_config, reload_config

__all__ = [
    "RuntimeConfig",
    "LoggingConfig",
    "get_config",
    "reload_config",
    "configure_logging",
]
