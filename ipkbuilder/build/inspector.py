"""
安装包检查器

读取已生成的 IPK 安装包，列出顶层条目以及控制归档、数据归档的内容。
"""

import gzip
import io
import tarfile
import zlib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..utils.logging import debug, LogStage
from .build_context import (
    ArchiveError,
    BuildIOError,
    CONTROL_ARCHIVE_NAME,
    DATA_ARCHIVE_NAME,
    DEBIAN_BINARY_NAME,
)


@dataclass
class MemberInfo:
    """归档成员信息"""
    name: str
    size: int
    mode: int
    uid: int = 0
    gid: int = 0
    is_directory: bool = False


@dataclass
class PackageInfo:
    """安装包信息"""
    path: Path
    entries: List[MemberInfo] = field(default_factory=list)
    control_members: List[MemberInfo] = field(default_factory=list)
    data_members: List[MemberInfo] = field(default_factory=list)
    control: Optional[str] = None
    debian_binary: Optional[str] = None

    @property
    def entry_names(self) -> List[str]:
        return [entry.name for entry in self.entries]

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['path'] = str(self.path)
        return data


def _member_info(member: tarfile.TarInfo) -> MemberInfo:
    return MemberInfo(
        name=member.name,
        size=member.size,
        mode=member.mode,
        uid=member.uid,
        gid=member.gid,
        is_directory=member.isdir(),
    )


def _read_members(archive: tarfile.TarFile) -> Dict[str, bytes]:
    contents = {}
    for member in archive.getmembers():
        if member.isfile():
            extracted = archive.extractfile(member)
            contents[member.name] = extracted.read() if extracted else b""
    return contents


def inspect_package(package_path: Union[str, Path]) -> PackageInfo:
    """检查安装包

    Raises:
        BuildIOError: 文件不存在或无法读取
        ArchiveError: 文件不是有效的 gzip tar 安装包
    """
    package_path = Path(package_path)
    if not package_path.is_file():
        raise BuildIOError(f"安装包不存在: {package_path}")

    info = PackageInfo(path=package_path.resolve())
    debug(f"检查安装包: {info.path}", stage=LogStage.INSPECT)

    try:
        with tarfile.open(package_path, 'r:gz') as outer:
            members = outer.getmembers()
            info.entries = [_member_info(m) for m in members]
            payloads = _read_members(outer)

        if CONTROL_ARCHIVE_NAME in payloads:
            with tarfile.open(fileobj=io.BytesIO(payloads[CONTROL_ARCHIVE_NAME]), mode='r:gz') as control:
                info.control_members = [_member_info(m) for m in control.getmembers()]
                control_files = _read_members(control)
            if 'control' in control_files:
                info.control = control_files['control'].decode('utf-8', errors='replace')

        if DATA_ARCHIVE_NAME in payloads:
            with tarfile.open(fileobj=io.BytesIO(payloads[DATA_ARCHIVE_NAME]), mode='r:gz') as data:
                info.data_members = [_member_info(m) for m in data.getmembers()]

        if DEBIAN_BINARY_NAME in payloads:
            info.debian_binary = payloads[DEBIAN_BINARY_NAME].decode('utf-8', errors='replace')

        debug(f"顶层条目: {info.entry_names}", stage=LogStage.INSPECT)

    except (tarfile.TarError, gzip.BadGzipFile, zlib.error, EOFError) as e:
        raise ArchiveError(f"无效的安装包 {package_path}: {e}") from e
    except OSError as e:
        raise BuildIOError(f"无法读取安装包 {package_path}: {e}") from e

    return info
