"""
归档写入工具

打开 gzip 压缩的 tar 流，并向其中追加内存条目或文件的原始字节。
"""

import gzip
import io
import tarfile
import zlib
from pathlib import Path
from typing import Optional, Union

from ..utils.logging import debug
from .build_context import ArchiveError, BuildIOError
from .header import HEADER_ENCODING, HEADER_FORMAT, TarHeaderBuilder


def open_gzip_tar(path: Path, compresslevel: int = 6, stage: Optional[str] = None) -> "GzipTarWriter":
    """创建 gzip 压缩的 tar 流用于写入

    Raises:
        BuildIOError: 目标文件无法创建
        ArchiveError: 压缩流无法初始化
    """
    try:
        fileobj = open(path, 'wb')
    except OSError as e:
        raise BuildIOError(f"无法创建 {path}: {e}") from e

    try:
        gzipobj = gzip.GzipFile(filename='', mode='wb', compresslevel=compresslevel, fileobj=fileobj)
        archive = tarfile.TarFile(
            mode='w', fileobj=gzipobj,
            format=HEADER_FORMAT, encoding=HEADER_ENCODING)
    except (OSError, ValueError, zlib.error, tarfile.TarError) as e:
        fileobj.close()
        raise ArchiveError(f"无法初始化压缩流 {path}: {e}") from e

    debug(f"打开归档 {path} (gzip level={compresslevel})", stage=stage)
    return GzipTarWriter(archive, gzipobj, fileobj)


class GzipTarWriter:
    """持有 tar、gzip 与底层文件三层句柄，close 时按顺序全部关闭"""

    def __init__(self, archive: tarfile.TarFile, gzipobj: gzip.GzipFile, fileobj):
        self.archive = archive
        self._gzipobj = gzipobj
        self._fileobj = fileobj

    def addfile(self, tarinfo: tarfile.TarInfo, fileobj=None) -> None:
        self.archive.addfile(tarinfo, fileobj)

    def add(self, name, arcname=None, recursive=True, filter=None) -> None:
        self.archive.add(name, arcname=arcname, recursive=recursive, filter=filter)

    def close(self) -> None:
        """写入 tar 结束块并刷新 gzip 尾部"""
        try:
            try:
                self.archive.close()
            finally:
                self._gzipobj.close()
        finally:
            self._fileobj.close()

    def abort(self) -> None:
        """失败路径：尽量释放句柄，不再写入结束块"""
        for handle in (self._gzipobj, self._fileobj):
            try:
                handle.close()
            except (OSError, ValueError, zlib.error) as e:
                debug(f"关闭归档句柄失败: {e}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.close()
        else:
            self.abort()
        return False


def append_entry(archive: GzipTarWriter, name: str, header: tarfile.TarInfo, payload: bytes) -> None:
    """把内存中的内容按给定名称写入归档

    Raises:
        ArchiveError: 写入失败
    """
    TarHeaderBuilder.seal(header, name)
    if header.size != len(payload):
        raise ArchiveError(f"条目 {name} 的头部大小 {header.size} 与内容长度 {len(payload)} 不一致")

    try:
        archive.addfile(header, io.BytesIO(payload))
    except (OSError, ValueError, zlib.error, tarfile.TarError) as e:
        raise ArchiveError(f"写入条目 {name} 失败: {e}") from e


def append_file(archive: GzipTarWriter, src_path: Union[str, Path], name: str, stage: Optional[str] = None) -> int:
    """把文件的原始字节作为一个条目写入归档

    Returns:
        int: 写入的字节数

    Raises:
        BuildIOError: 源文件无法读取
        ArchiveError: 写入失败
    """
    debug(f"打包 {src_path} -> {name}", stage=stage)
    header, payload = TarHeaderBuilder.from_file(src_path)
    append_entry(archive, name, header, payload)
    return len(payload)
