"""
工具模块单元测试

测试输出门面与路径工具函数。
"""

from pathlib import Path

import pytest

from ipkbuilder.utils import format_mode, format_size, expand_path, ensure_directory, is_within
from ipkbuilder.utils.logging import (
    LogStage,
    OutputFacade,
    OutputLevel,
    close_logger,
    configure_logging,
    get_output_facade,
)


@pytest.fixture
def facade():
    """独立的全局输出门面，测试结束后关闭"""
    close_logger()
    yield get_output_facade()
    close_logger()


class TestOutputFacade:
    """OutputFacade 测试"""

    def test_default_level(self):
        """测试默认级别"""
        assert OutputFacade().get_level() == OutputLevel.INFO

    def test_set_level_ignores_unknown(self):
        """测试未知级别被忽略"""
        output = OutputFacade()
        output.set_level("TRACE")
        assert output.get_level() == OutputLevel.INFO

    def test_debug_filtered_at_info(self, capsys):
        """测试 INFO 级别下不输出调试信息"""
        output = OutputFacade()
        output.debug("hidden message")
        output.info("visible message", stage=LogStage.CONTROL)

        captured = capsys.readouterr().out
        assert "hidden message" not in captured
        assert "visible message" in captured
        assert "CONTROL" in captured

    def test_error_goes_to_stderr(self, capsys):
        """测试错误信息写入 stderr"""
        OutputFacade().error("something failed")

        captured = capsys.readouterr()
        assert "something failed" in captured.err
        assert "something failed" not in captured.out

    def test_message_with_brackets(self, capsys):
        """测试包含方括号的消息原样输出"""
        OutputFacade().info("启用的脚本: ['postinst']")

        assert "['postinst']" in capsys.readouterr().out


class TestConfigureLogging:
    """configure_logging 测试"""

    def test_log_file(self, facade, tmp_path):
        """测试日志同时写入文件"""
        log_file = tmp_path / "logs" / "build.log"

        configure_logging(OutputLevel.DEBUG, log_file)
        facade.debug("debug line", stage=LogStage.DATA)
        facade.warning("warning line")

        content = log_file.read_text(encoding="utf-8")
        assert "[DEBUG] [DATA] debug line" in content
        assert "[WARNING] warning line" in content

    def test_level(self, facade):
        """测试设置全局级别"""
        configure_logging(OutputLevel.WARNING)
        assert facade.get_level() == OutputLevel.WARNING


class TestPathUtils:
    """路径工具测试"""

    @pytest.mark.parametrize("size,expected", [
        (0, "0 B"),
        (512, "512 B"),
        (1536, "1.5 KB"),
        (5 * 1024 * 1024, "5.0 MB"),
    ])
    def test_format_size(self, size, expected):
        assert format_size(size) == expected

    def test_format_mode(self):
        assert format_mode(0o755) == "0755"
        assert format_mode(0o100644) == "0644"

    def test_expand_path(self, monkeypatch, tmp_path):
        """测试展开环境变量"""
        monkeypatch.setenv("IPK_TEST_ROOT", str(tmp_path))

        assert expand_path("$IPK_TEST_ROOT/dist") == (tmp_path / "dist").resolve()

    def test_ensure_directory(self, tmp_path):
        target = tmp_path / "a" / "b"
        assert ensure_directory(target) == target
        assert Path(target).is_dir()

    def test_is_within(self, tmp_path):
        """测试目录包含关系按路径层级判断"""
        root = tmp_path / "rootfs"

        assert is_within(root, root)
        assert is_within(root / "dist", root)
        assert is_within(root / "a" / ".." / "b", root)
        assert not is_within(tmp_path / "rootfs-out", root)
        assert not is_within(tmp_path, root)
