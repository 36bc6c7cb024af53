"""
测试公共夹具
"""

from pathlib import Path

import pytest

from ipkbuilder.config.schema import PackageSpec, ScriptEntry


CONTROL_TEXT = (
    "Package: demo\n"
    "Version: 1.0.0\n"
    "Architecture: all\n"
    "Maintainer: dev@example.com\n"
    "Description: demo package\n"
)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """带一个可执行文件的数据目录"""
    root = tmp_path / "rootfs"
    (root / "usr" / "bin").mkdir(parents=True)
    binary = root / "usr" / "bin" / "foo"
    binary.write_bytes(b"#!/bin/sh\necho foo\n")
    binary.chmod(0o755)
    return root


@pytest.fixture
def control_file(tmp_path: Path) -> Path:
    path = tmp_path / "control"
    path.write_text(CONTROL_TEXT, encoding="utf-8")
    return path


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    path = tmp_path / "dist"
    path.mkdir()
    return path


@pytest.fixture
def spec(data_dir: Path, control_file: Path, output_dir: Path) -> PackageSpec:
    """最小可构建的包描述：control 来自文件，没有启用的脚本"""
    return PackageSpec(
        control=ScriptEntry.from_path(control_file),
        data_path=data_dir,
        output_path=output_dir,
    )


@pytest.fixture
def control_text() -> str:
    return CONTROL_TEXT
