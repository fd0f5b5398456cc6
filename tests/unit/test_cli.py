"""
命令行单元测试
"""

from pathlib import Path

import pytest

from drawio_batch import cli
from drawio_batch.interfaces import InvalidOptionError
from drawio_batch.models import FitBounds, RunReport, RunStatus


class TestOptionParsers:
    """选项解析测试"""

    @pytest.mark.parametrize("value,expected", [("1", 1), ("75", 75), ("100", 100)])
    def test_quality(self, value, expected):
        assert cli.parse_quality(value) == expected

    @pytest.mark.parametrize("value", ["0", "101", "abc", "-5"])
    def test_quality_invalid(self, value):
        with pytest.raises(InvalidOptionError):
            cli.parse_quality(value)

    def test_scale(self):
        assert cli.parse_scale("2.5") == 2.5

    @pytest.mark.parametrize("value", ["0", "-1", "x", "nan"])
    def test_scale_invalid(self, value):
        with pytest.raises(InvalidOptionError):
            cli.parse_scale(value)

    def test_bounds(self):
        assert cli.parse_bounds("800x600") == FitBounds(width=800, height=600)

    @pytest.mark.parametrize("value", ["800", "800x600x1", "0x600", "ax600", "-1x5"])
    def test_bounds_invalid(self, value):
        with pytest.raises(InvalidOptionError):
            cli.parse_bounds(value)

    def test_diagram_id_invalid(self):
        with pytest.raises(InvalidOptionError):
            cli.parse_diagram_id("-1")


class TestParser:
    """参数解析器测试"""

    def test_defaults(self):
        args = cli.build_parser().parse_args(["in.drawio", "out.pdf"])
        assert args.format == "pdf"
        assert args.quality == 75
        assert args.scale == 1.0
        assert args.bounds == FitBounds()
        assert args.diagram_id is None

    def test_legacy_diagram_id_flag(self):
        args = cli.build_parser().parse_args(["--diagramId", "2", "in.drawio", "out.pdf"])
        assert args.diagram_id == 2

    def test_invalid_format_exits(self):
        with pytest.raises(SystemExit) as exc:
            cli.build_parser().parse_args(["-f", "tiff", "in.drawio", "out.pdf"])
        assert exc.value.code == 2

    def test_invalid_quality_exits(self, capsys: pytest.CaptureFixture):
        """非法值退出码2，并显示具体原因"""
        with pytest.raises(SystemExit) as exc:
            cli.build_parser().parse_args(["-q", "0", "in.drawio", "out.pdf"])
        assert exc.value.code == 2
        assert "质量参数需在 1..100 之间" in capsys.readouterr().err

    def test_invalid_bounds_message(self, capsys: pytest.CaptureFixture):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["-b", "800", "in.drawio", "out.pdf"])
        assert "尺寸必须是两个数 WxH" in capsys.readouterr().err


class TestMain:
    """主入口测试"""

    @pytest.fixture
    def config_file(self, temp_dir: Path) -> Path:
        path = temp_dir / "drawio_batch.yaml"
        path.write_text("runtime_options:\n  timeouts:\n    render_ms: 1000\n", encoding="utf-8")
        return path

    def test_missing_config_file_exits(self, temp_dir: Path, capsys: pytest.CaptureFixture):
        """显式指定的配置文件不存在 -> 退出码2"""
        with pytest.raises(SystemExit) as exc:
            cli.main(["-c", str(temp_dir / "none.yaml"), "in.drawio", "out.png"])
        assert exc.value.code == 2
        assert "配置文件不存在" in capsys.readouterr().err

    def test_exit_code_from_report(self, monkeypatch: pytest.MonkeyPatch, config_file: Path):
        captured = {}

        class StubPipeline:
            def __init__(self, run_config, runtime_config=None):
                captured["run_config"] = run_config

            def run(self) -> RunReport:
                report = RunReport(input_path=Path("in.drawio"), output_path=Path("out.png"))
                report.mark_failed("render timeout")
                return report

        monkeypatch.setattr(cli, "ExportPipeline", StubPipeline)
        code = cli.main(
            ["-f", "png", "-q", "50", "-s", "2", "-b", "10x20", "-d", "1",
             "-c", str(config_file), "in.drawio", "out.png"]
        )

        assert code == 1
        run_config = captured["run_config"]
        assert run_config.format == "png"
        assert run_config.quality == 50
        assert run_config.scale == 2.0
        assert run_config.bounds == FitBounds(width=10, height=20)
        assert run_config.diagram_id == 1

    def test_success_exit_code(self, monkeypatch: pytest.MonkeyPatch, config_file: Path):
        class StubPipeline:
            def __init__(self, run_config, runtime_config=None):
                pass

            def run(self) -> RunReport:
                report = RunReport(input_path=Path("a"), output_path=Path("b"))
                report.mark_succeeded()
                return report

        monkeypatch.setattr(cli, "ExportPipeline", StubPipeline)
        assert cli.main(["-c", str(config_file), "a", "b"]) == 0
        assert RunStatus.SUCCEEDED.value == "succeeded"
