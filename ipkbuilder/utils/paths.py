"""
路径工具

命令行参数展开、输出目录创建，以及日志中使用的大小/权限格式化。
"""

import os
from pathlib import Path
from typing import Union

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def expand_path(path: Union[str, Path]) -> Path:
    """展开环境变量与 ~，返回绝对路径"""
    expanded = os.path.expandvars(os.fspath(path))
    return Path(expanded).expanduser().resolve()


def ensure_directory(path: Union[str, Path]) -> Path:
    """创建目录（含父目录），已存在时直接返回

    Raises:
        OSError: 目录无法创建，或同名路径已存在但不是目录
    """
    directory = Path(path)
    if not directory.is_dir():
        directory.mkdir(parents=True, exist_ok=True)
    return directory


def is_within(path: Union[str, Path], root: Union[str, Path]) -> bool:
    """判断 path 是否就是 root 或位于 root 之下（按解析后的真实路径比较）"""
    path = Path(path).resolve()
    root = Path(root).resolve()
    return path == root or root in path.parents


def format_size(size_bytes: int) -> str:
    """把字节数格式化为带单位的字符串（1024 进制）"""
    if size_bytes < 1024:
        return f"{size_bytes} B"

    size = float(size_bytes)
    for unit in _SIZE_UNITS[1:]:
        size /= 1024.0
        if size < 1024.0 or unit == _SIZE_UNITS[-1]:
            break
    return f"{size:.1f} {unit}"


def format_mode(mode: int) -> str:
    """将权限位格式化为八进制字符串，例如 0o755 -> '0755'"""
    return f"{mode & 0o7777:04o}"
