"""
条目解析器单元测试
"""

import pytest

from ipkbuilder.build.build_context import BuildIOError, PackageError
from ipkbuilder.build.header import DEFAULT_MODE, EXECUTABLE_MODE
from ipkbuilder.build.resolver import ScriptResolver, resolve_entry
from ipkbuilder.config.schema import ScriptEntry, ScriptSource


class TestScriptResolver:
    """ScriptResolver 测试"""

    def test_inline_text_forced_executable(self):
        """测试内联文本在强制可执行时为 0755"""
        entry = ScriptEntry.from_text("#!/bin/sh\nexit 0\n")
        header, payload = ScriptResolver().resolve(entry, "postinst", force_executable_if_inline=True)

        assert payload == b"#!/bin/sh\nexit 0\n"
        assert header.size == len(payload)
        assert header.mode == EXECUTABLE_MODE
        assert header.name == "postinst"

    def test_inline_text_default_mode(self):
        """测试内联文本不强制时为 0644"""
        entry = ScriptEntry.from_text("Package: demo\n")
        header, _payload = resolve_entry(entry, "control")

        assert header.mode == DEFAULT_MODE

    def test_inline_text_utf8(self):
        """测试内联文本按 UTF-8 编码"""
        entry = ScriptEntry.from_text("Description: 示例\n")
        header, payload = resolve_entry(entry, "control")

        assert payload == "Description: 示例\n".encode("utf-8")
        assert header.size == len(payload)

    def test_path_source_keeps_default_mode(self, tmp_path):
        """测试来自文件的脚本即使强制可执行也保持 0644"""
        script = tmp_path / "preinst.sh"
        script.write_text("#!/bin/sh\n")
        script.chmod(0o755)

        entry = ScriptEntry.from_path(script)
        header, payload = resolve_entry(entry, "preinst", force_executable_if_inline=True)

        assert payload == b"#!/bin/sh\n"
        assert header.mode == DEFAULT_MODE

    def test_path_source_without_path(self):
        """测试来源为文件但未设置路径"""
        entry = ScriptEntry(source=ScriptSource.PATH, enabled=True)

        with pytest.raises(PackageError) as exc_info:
            resolve_entry(entry, "prerm")

        assert "prerm" in str(exc_info.value)

    def test_path_source_missing_file(self, tmp_path):
        """测试文件不存在"""
        entry = ScriptEntry.from_path(tmp_path / "nope")

        with pytest.raises(BuildIOError):
            resolve_entry(entry, "control")
