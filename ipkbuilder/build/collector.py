"""
数据目录收集器

遍历数据目录，按确定顺序（目录先于其内容，同级按名称排序）收集条目，
并计算包内相对路径（POSIX 分隔符）。
"""

import os
import stat
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Dict, Iterator, List, Union

from .build_context import BuildIOError


@dataclass
class DataEntry:
    """数据目录中的单个条目"""
    path: Path  # 磁盘上的路径
    arcname: str  # 包内相对路径，如 usr/bin/foo
    size: int  # 文件大小（目录、链接为 0）
    mode: int  # 权限位
    is_directory: bool = False
    is_symlink: bool = False

    def to_dict(self) -> Dict[str, object]:
        """转换为字典格式"""
        return {
            'path': self.arcname,
            'size': self.size,
            'mode': self.mode,
            'is_directory': self.is_directory,
            'is_symlink': self.is_symlink,
        }


class DataCollector:
    """数据目录收集器"""

    def __init__(self):
        self.collected: List[DataEntry] = []
        self.total_size: int = 0

    def collect(self, root: Union[str, Path]) -> List[DataEntry]:
        """收集数据目录下的全部条目（不包含根目录本身）

        Raises:
            BuildIOError: 根目录不存在、不是目录或子目录无法读取
        """
        root = Path(root)
        self.collected = []
        self.total_size = 0

        if not root.exists():
            raise BuildIOError(f"数据目录不存在: {root}")
        if not root.is_dir():
            raise BuildIOError(f"数据路径不是目录: {root}")

        for entry in self._walk_directory(root, PurePosixPath()):
            self.collected.append(entry)
            if not entry.is_directory:
                self.total_size += entry.size

        return self.collected

    def get_statistics(self) -> Dict[str, int]:
        """获取收集统计信息"""
        return {
            'total_files': sum(1 for e in self.collected if not e.is_directory),
            'total_directories': sum(1 for e in self.collected if e.is_directory),
            'total_items': len(self.collected),
            'total_size': self.total_size,
        }

    def _walk_directory(self, directory: Path, prefix: PurePosixPath) -> Iterator[DataEntry]:
        """递归遍历目录，不跟随符号链接"""
        try:
            with os.scandir(directory) as it:
                children = sorted(it, key=lambda e: e.name)
        except OSError as e:
            raise BuildIOError(f"无法读取目录 {directory}: {e}") from e

        for child in children:
            arcname = prefix / child.name
            entry = self._create_entry(Path(child.path), str(arcname))
            yield entry
            if entry.is_directory:
                yield from self._walk_directory(entry.path, arcname)

    def _create_entry(self, path: Path, arcname: str) -> DataEntry:
        try:
            st = path.lstat()
        except OSError as e:
            raise BuildIOError(f"无法读取 {path}: {e}") from e

        is_symlink = stat.S_ISLNK(st.st_mode)
        is_directory = stat.S_ISDIR(st.st_mode)
        return DataEntry(
            path=path,
            arcname=arcname,
            size=st.st_size if stat.S_ISREG(st.st_mode) else 0,
            mode=stat.S_IMODE(st.st_mode),
            is_directory=is_directory,
            is_symlink=is_symlink,
        )


def collect_data(root: Union[str, Path]) -> List[DataEntry]:
    """便捷函数：收集数据目录"""
    return DataCollector().collect(root)
