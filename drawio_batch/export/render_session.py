"""
渲染会话 - 驱动无头 Chromium 中的 draw.io 渲染页

职责：
1. 启动浏览器并加载渲染入口页（export3.html），等待字体就绪
2. 逐图调用页面内 render()，等待完成标记 #LoadingComplete 出现
3. 读取完成标记上的 bounds，截取 pdf / 位图 / svg
4. 每张图之间移除完成标记与渲染结果节点
5. 关闭浏览器（恰好一次）

依赖：
- playwright: 浏览器自动化（同步API，整个运行期只有一个页面）

测试要点：
- test_render_timeout: 完成标记未出现 -> RenderTimeoutError
- test_read_bounds_missing: bounds 缺失 -> InvalidBoundsError
- test_close_once: 关闭只执行一次
"""

from __future__ import annotations

import json
import logging
from typing import Any

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright
from pydantic import ValidationError

from ..config import RuntimeConfig, get_config
from ..interfaces import (
    EngineStartError,
    InvalidBoundsError,
    IRenderSession,
    RenderError,
    RenderTimeoutError,
)
from ..models import Bounds, RenderRequest, Viewport
from .svg import to_standalone_svg

logger = logging.getLogger(__name__)

# PDF 高度多留1像素，抵消渲染器自身取整造成的末行裁切
PDF_HEIGHT_PADDING = 1

_RENDER_JS = "params => { render(params); }"

_FONTS_READY_JS = "() => document.fonts.ready.then(() => true)"

_READ_SVG_JS = """selector => {
  const svg = document.querySelector(selector);
  if (!svg) {
    return null;
  }
  return {
    markup: new XMLSerializer().serializeToString(svg),
    width: svg.width.baseVal.value,
    height: svg.height.baseVal.value,
  };
}"""

_REMOVE_JS = """selectors => {
  for (const selector of selectors) {
    const node = document.querySelector(selector);
    if (node && node.parentNode) {
      node.parentNode.removeChild(node);
    }
  }
}"""


class RenderSession(IRenderSession):
    """Playwright 渲染会话实现"""

    def __init__(self, config: RuntimeConfig | None = None):
        self.config = config or get_config()
        self.completion_selector = self.config.renderer.completion_selector
        self.surface_selector = self.config.renderer.surface_selector
        self._playwright: Any = None
        self._browser: Any = None
        self._page: Any = None
        self._closed = False

    def start(self) -> None:
        """启动浏览器并加载渲染入口页"""
        entry = self.config.get_entry_path()
        if not entry.exists():
            raise EngineStartError(f"渲染入口页不存在: {entry}")

        try:
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(
                headless=self.config.browser.headless,
                args=self.config.browser.args,
                executable_path=self.config.browser.executable_path,
                timeout=self.config.timeouts.launch_ms,
            )
            self._page = self._browser.new_page()
            self._page.goto(entry.as_uri(), timeout=self.config.timeouts.navigation_ms)
            self._page.evaluate(_FONTS_READY_JS)
        except (PlaywrightError, OSError) as e:
            raise EngineStartError(f"渲染引擎启动失败: {e}") from e

        logger.info(f"渲染引擎已就绪: {entry}")

    def render_diagram(self, request: RenderRequest) -> None:
        """调用渲染并等待完成标记"""
        page = self._require_page()
        try:
            page.evaluate(_RENDER_JS, request.to_engine_params())
        except PlaywrightError as e:
            raise RenderError(f"第{request.diagram_index}张图渲染失败: {e}") from e

        try:
            page.wait_for_selector(
                self.completion_selector,
                state="attached",
                timeout=self.config.timeouts.render_ms,
            )
        except PlaywrightTimeoutError as e:
            raise RenderTimeoutError(
                f"第{request.diagram_index}张图渲染超时"
                f"（{self.config.timeouts.render_ms}ms 内未出现 {self.completion_selector}）"
            ) from e

    def read_completion_bounds(self) -> Bounds:
        """读取并解析完成标记上的 bounds"""
        page = self._require_page()
        try:
            raw = page.get_attribute(self.completion_selector, "bounds")
        except PlaywrightError as e:
            raise InvalidBoundsError(f"无法读取完成标记: {e}") from e

        if not raw:
            raise InvalidBoundsError("完成标记缺少 bounds 属性")
        try:
            return Bounds.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as e:
            raise InvalidBoundsError(f"bounds 无法解析: {raw!r}") from e

    def set_viewport(self, viewport: Viewport) -> None:
        try:
            self._require_page().set_viewport_size(viewport.as_size())
        except PlaywrightError as e:
            raise RenderError(f"设置视口失败: {e}") from e

    def capture_output(
        self,
        kind: str,
        viewport: Viewport,
        clip: Bounds,
        quality: int | None = None,
    ) -> bytes:
        """从页面截取输出（pdf / svg / png / jpeg）"""
        page = self._require_page()
        try:
            if kind == "pdf":
                return page.pdf(
                    width=f"{viewport.width}px",
                    height=f"{viewport.height + PDF_HEIGHT_PADDING}px",
                    page_ranges="1",
                )
            if kind == "svg":
                return self._capture_svg(page)
            if kind in ("png", "jpeg"):
                options: dict[str, Any] = {"type": kind, "clip": clip.as_clip()}
                if kind == "jpeg" and quality is not None:
                    options["quality"] = quality
                return page.screenshot(**options)
        except PlaywrightError as e:
            raise RenderError(f"截取 {kind} 输出失败: {e}") from e

        raise RenderError(f"不支持的截取类型: {kind}")

    def _capture_svg(self, page: Any) -> bytes:
        data = page.evaluate(_READ_SVG_JS, self.surface_selector)
        if not data:
            raise RenderError(f"页面中没有渲染结果节点: {self.surface_selector}")
        source = to_standalone_svg(data["markup"], data["width"], data["height"])
        return source.encode("utf-8")

    def cleanup_frame(self) -> None:
        """移除完成标记与渲染结果节点"""
        page = self._require_page()
        try:
            page.evaluate(_REMOVE_JS, [self.completion_selector, self.surface_selector])
        except PlaywrightError as e:
            raise RenderError(f"清理渲染结果失败: {e}") from e

    def close(self) -> None:
        """关闭浏览器并停止 Playwright（重复调用无副作用）"""
        if self._closed:
            return
        self._closed = True

        try:
            if self._browser is not None:
                self._browser.close()
        except PlaywrightError as e:
            logger.warning(f"关闭浏览器失败: {e}")
        finally:
            self._browser = None
            self._page = None
            if self._playwright is not None:
                self._playwright.stop()
                self._playwright = None
        logger.debug("渲染引擎已关闭")

    def _require_page(self) -> Any:
        if self._page is None:
            raise EngineStartError("渲染会话未启动")
        return self._page
