"""
pytest 配置与公共 fixtures

使用方式：
    def test_something(fake_session, run_config_factory):
        pipeline = ExportPipeline(run_config_factory(output="out.png"), ...)
"""

from __future__ import annotations

import io
import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest
from PIL import Image

from drawio_batch.config import RuntimeConfig
from drawio_batch.config.runtime_config import RendererConfig
from drawio_batch.interfaces import IRenderSession
from drawio_batch.models import Bounds, RenderRequest, RunConfig, Viewport

# ============================================================================
# 文档样例
# ============================================================================

THREE_PAGE_DOCUMENT = """<?xml version="1.0" encoding="UTF-8"?>
<mxfile host="app.diagrams.net">
  <diagram id="p1" name="Page-1">
    <mxGraphModel><root><mxCell id="0"/><mxCell id="1" parent="0"/></root></mxGraphModel>
  </diagram>
  <diagram id="p2" name="Page-2">
    <mxGraphModel><root><mxCell id="0"/></root></mxGraphModel>
  </diagram>
  <diagram id="p3" name="Page-3">7ZZNb4MwDIZ/DfdCWrWHdR26S3fooeeIeBA1YJSY0u7Xz4yDhbWVKnWTdtnRsWP7sR+HCM</diagram>
</mxfile>
"""

SINGLE_PAGE_DOCUMENT = """<mxfile><diagram id="only" name="Only">x</diagram></mxfile>"""


def make_png(width: int = 4, height: int = 3) -> bytes:
    """生成一张小 png"""
    buf = io.BytesIO()
    Image.new("RGBA", (width, height), (255, 255, 255, 255)).save(buf, format="PNG")
    return buf.getvalue()


# ============================================================================
# 假渲染会话
# ============================================================================

class FakeRenderSession(IRenderSession):
    """不启动浏览器的渲染会话，记录所有调用"""

    def __init__(
        self,
        bounds: Bounds | None = None,
        fail_render_at: dict[int, Exception] | None = None,
        fail_start: Exception | None = None,
    ):
        self.bounds = bounds or Bounds(x=10.2, y=5.0, width=100, height=50)
        self.fail_render_at = fail_render_at or {}
        self.fail_start = fail_start
        self.calls: list[tuple] = []
        self.start_count = 0
        self.close_count = 0
        self.rendered: list[RenderRequest] = []
        self._marker = False

    def start(self) -> None:
        self.start_count += 1
        self.calls.append(("start",))
        if self.fail_start:
            raise self.fail_start

    def render_diagram(self, request: RenderRequest) -> None:
        self.calls.append(("render", request.diagram_index))
        # 上一张图未清理时不允许渲染下一张
        assert not self._marker, "render before cleanup"
        self.rendered.append(request)
        error = self.fail_render_at.get(request.diagram_index)
        if error:
            raise error
        self._marker = True

    def read_completion_bounds(self) -> Bounds:
        self.calls.append(("bounds",))
        return self.bounds

    def set_viewport(self, viewport: Viewport) -> None:
        self.calls.append(("viewport", viewport.width, viewport.height))

    def capture_output(self, kind, viewport, clip, quality=None) -> bytes:
        self.calls.append(("capture", kind, quality))
        if kind == "pdf":
            return b"%PDF-1.4 fake"
        if kind == "svg":
            return b'<?xml version="1.0" standalone="no"?>\r\n<svg/>'
        return make_png()

    def cleanup_frame(self) -> None:
        self.calls.append(("cleanup",))
        self._marker = False

    def close(self) -> None:
        self.close_count += 1
        self.calls.append(("close",))

    @property
    def closed(self) -> bool:
        return self.close_count > 0


@pytest.fixture
def fake_session() -> FakeRenderSession:
    return FakeRenderSession()


@pytest.fixture
def session_factory(fake_session: FakeRenderSession) -> Callable[[RuntimeConfig], FakeRenderSession]:
    """返回固定假会话的工厂"""
    return lambda config: fake_session


# ============================================================================
# 配置 Fixtures
# ============================================================================

@pytest.fixture
def runtime_config(temp_dir: Path) -> RuntimeConfig:
    """运行期配置（渲染入口指向临时文件）"""
    entry = temp_dir / "export3.html"
    entry.write_text("<html></html>", encoding="utf-8")
    return RuntimeConfig(renderer=RendererConfig(entry_path=str(entry)))


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """临时目录"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def three_page_input(temp_dir: Path) -> Path:
    path = temp_dir / "chart.drawio"
    path.write_text(THREE_PAGE_DOCUMENT, encoding="utf-8")
    return path


@pytest.fixture
def single_page_input(temp_dir: Path) -> Path:
    path = temp_dir / "single.xml"
    path.write_text(SINGLE_PAGE_DOCUMENT, encoding="utf-8")
    return path


@pytest.fixture
def run_config_factory(temp_dir: Path) -> Callable[..., RunConfig]:
    """构造 RunConfig，output 相对临时目录"""

    def _make(input_path: Path, output: str = "out.png", **kwargs) -> RunConfig:
        return RunConfig(
            input_path=input_path,
            output_path=temp_dir / output,
            **kwargs,
        )

    return _make
