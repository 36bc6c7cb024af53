"""构建服务模块

提供 IPK 安装包构建的核心功能。
"""

from .builder import Builder, BuildResult, make_package
from .build_context import (
    BuildContext,
    BuildError,
    BuildIOError,
    ArchiveError,
    PackageError,
)
from .collector import DataCollector, DataEntry, collect_data
from .header import TarHeaderBuilder, DEFAULT_MODE, EXECUTABLE_MODE
from .resolver import ScriptResolver, resolve_entry
from .inspector import PackageInfo, MemberInfo, inspect_package

__all__ = [
    # 主构建器
    "Builder",
    "BuildResult",
    "make_package",
    "BuildContext",

    # 异常
    "BuildError",
    "BuildIOError",
    "ArchiveError",
    "PackageError",

    # 数据目录收集
    "DataCollector",
    "DataEntry",
    "collect_data",

    # 头部与条目解析
    "TarHeaderBuilder",
    "DEFAULT_MODE",
    "EXECUTABLE_MODE",
    "ScriptResolver",
    "resolve_entry",

    # 安装包检查
    "PackageInfo",
    "MemberInfo",
    "inspect_package",
]
