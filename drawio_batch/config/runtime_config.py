"""
运行期配置 - 读取 config/drawio_batch.yaml

职责：
- 加载浏览器/渲染入口/超时/日志等运行参数
- 提供环境变量覆盖机制（DRAWIO_BATCH_ 前缀，嵌套用 __ 分隔）
- 类型安全的配置访问
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

# 项目根目录，相对路径默认以此为基准
PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config" / "drawio_batch.yaml"


class BrowserConfig(BaseModel):
    """浏览器启动配置"""

    headless: bool = True
    args: list[str] = Field(
        default_factory=lambda: ["--no-sandbox", "--disable-web-security"]
    )
    executable_path: str | None = None


class RendererConfig(BaseModel):
    """渲染入口配置（draw.io export3.html）"""

    entry_path: str = "drawio/src/main/webapp/export3.html"
    completion_selector: str = "#LoadingComplete"
    surface_selector: str = "svg"


class TimeoutConfig(BaseModel):
    """超时配置（毫秒）"""

    launch_ms: int = 30_000
    navigation_ms: int = 30_000
    render_ms: int = 30_000


class LoggingConfig(BaseModel):
    """日志配置"""

    log_level: str = "INFO"
    log_to_file: bool = False
    log_file: str = "drawio-batch.log"


class RuntimeConfig(BaseSettings):
    """运行期配置（支持环境变量覆盖）"""

    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    renderer: RendererConfig = Field(default_factory=RendererConfig)
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "DRAWIO_BATCH_",
        "env_nested_delimiter": "__",
    }

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> RuntimeConfig:
        """从YAML文件加载配置（文件不存在时返回默认配置）"""
        path = Path(yaml_path)
        if not path.exists():
            config = cls()
            config._resolve_paths(base_dir=PROJECT_ROOT)
            return config

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        runtime_opts = data.get("runtime_options", {})

        config = cls(
            browser=BrowserConfig(**cls._extract(runtime_opts, "browser")),
            renderer=RendererConfig(**cls._extract(runtime_opts, "renderer")),
            timeouts=TimeoutConfig(**cls._extract(runtime_opts, "timeouts")),
            logging=LoggingConfig(**cls._extract(runtime_opts, "logging")),
        )

        config._resolve_paths(base_dir=path.parent)
        return config

    @staticmethod
    def _extract(data: dict[str, Any], key: str) -> dict[str, Any]:
        """提取并展平配置（支持 {default: ...} 包装写法）"""
        section = data.get(key) or {}
        result = {}
        for k, v in section.items():
            if isinstance(v, dict) and "default" in v:
                result[k] = v["default"]
            elif not isinstance(v, dict):
                result[k] = v
        return result

    def _resolve_paths(self, base_dir: Path) -> None:
        """解析相对路径配置为绝对路径（基于配置文件所在目录）"""
        entry = Path(self.renderer.entry_path)
        if not entry.is_absolute():
            self.renderer.entry_path = str((base_dir / entry).resolve())
        if self.browser.executable_path:
            exe = Path(self.browser.executable_path)
            if not exe.is_absolute():
                self.browser.executable_path = str((base_dir / exe).resolve())
        if self.logging.log_to_file:
            log_file = Path(self.logging.log_file)
            if not log_file.is_absolute():
                self.logging.log_file = str((base_dir / log_file).resolve())

    def get_entry_path(self) -> Path:
        """渲染入口页面的绝对路径"""
        entry = Path(self.renderer.entry_path)
        if not entry.is_absolute():
            entry = PROJECT_ROOT / entry
        return entry.resolve()


# 全局配置实例
_config: RuntimeConfig | None = None


def get_config() -> RuntimeConfig:
    """获取全局配置（惰性加载）"""
    global _config
    if _config is None:
        _config = RuntimeConfig.from_yaml(DEFAULT_CONFIG_PATH)
    return _config


def reload_config(yaml_path: str | Path | None = None) -> RuntimeConfig:
    """重新加载配置"""
    global _config
    path = yaml_path or DEFAULT_CONFIG_PATH
    _config = RuntimeConfig.from_yaml(path)
    return _config
