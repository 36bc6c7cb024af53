"""
条目解析器

把一个"文件或文本"条目解析为具体的 tar 头部与内容。
"""

import tarfile
from typing import Tuple

from ..config.schema import ScriptEntry, ScriptSource
from .build_context import PackageError
from .header import EXECUTABLE_MODE, TarHeaderBuilder


class ScriptResolver:
    """条目解析器

    权限策略：
      - 来自文件的条目使用默认权限 0644，与条目角色无关；
      - 来自内联文本的条目在 force_executable_if_inline 为真时强制为 0755。
    """

    def resolve(
        self,
        entry: ScriptEntry,
        archive_name: str,
        force_executable_if_inline: bool = False,
    ) -> Tuple[tarfile.TarInfo, bytes]:
        """解析条目

        Args:
            entry: 条目配置
            archive_name: 包内名称
            force_executable_if_inline: 内联文本是否强制可执行

        Returns:
            (头部, 内容)

        Raises:
            PackageError: 来源为文件但未设置路径
            BuildIOError: 文件无法打开或读取
        """
        if entry.source == ScriptSource.PATH:
            if entry.path is None:
                raise PackageError(f"{archive_name} 未设置文件路径")
            return TarHeaderBuilder.from_file(entry.path, archive_name)

        payload = entry.text.encode('utf-8')
        header = TarHeaderBuilder.from_bytes(payload, archive_name)
        if force_executable_if_inline:
            TarHeaderBuilder.set_mode(header, EXECUTABLE_MODE)
        return header, payload


def resolve_entry(entry: ScriptEntry, archive_name: str,
                  force_executable_if_inline: bool = False) -> Tuple[tarfile.TarInfo, bytes]:
    """便捷函数：解析单个条目"""
    return ScriptResolver().resolve(entry, archive_name, force_executable_if_inline)
