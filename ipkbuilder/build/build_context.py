"""
构建上下文模块

定义构建过程中的共享数据结构和异常类。
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ..config.schema import PackageSpec

# 进度回调类型 (stage, current, total, message)
ProgressCallback = Callable[[str, int, int, str], None]

CONTROL_ARCHIVE_NAME = "control.tar.gz"
DATA_ARCHIVE_NAME = "data.tar.gz"
DEBIAN_BINARY_NAME = "debian_binary"


class BuildError(Exception):
    """构建错误"""
    pass


class BuildIOError(BuildError):
    """文件打开/读取/写入/删除失败"""
    pass


class ArchiveError(BuildError):
    """tar 或 gzip 编码失败"""
    pass


class PackageError(BuildError):
    """包级错误：必填配置缺失或旧包无法删除"""
    pass


@dataclass
class BuildContext:
    """构建上下文，包含构建过程中的共享数据"""
    spec: PackageSpec
    progress_callback: Optional[ProgressCallback] = None

    # 构建过程中生成的路径
    output_dir: Optional[Path] = None
    control_archive_path: Optional[Path] = None
    data_archive_path: Optional[Path] = None
    package_path: Optional[Path] = None

    # 本次构建写出的文件，失败时用于清理
    created_files: List[Path] = field(default_factory=list)
    package_complete: bool = False

    # 统计信息
    build_stats: Dict[str, Any] = field(default_factory=lambda: {
        'start_time': 0,
        'end_time': 0,
        'control_entries': [],
        'data_entries': 0,
        'data_size': 0,
        'package_entries': [],
        'package_size': 0,
    })

    def report(self, stage: str, current: int, message: str = "") -> None:
        """向进度回调报告进度（百分比）"""
        if self.progress_callback:
            self.progress_callback(stage, current, 100, message)

    def track(self, path: Path) -> None:
        """记录本次构建写出的文件"""
        if path not in self.created_files:
            self.created_files.append(path)

    def untrack(self, path: Path) -> None:
        if path in self.created_files:
            self.created_files.remove(path)
