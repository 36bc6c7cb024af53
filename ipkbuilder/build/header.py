"""
Tar 头部构建器

负责为包内条目生成 tar 头部：大小取自内容长度，属主固定为 root (0/0)，
默认权限 0644。校验和在所有字段设置完毕后最后计算；任何字段变化后
都必须重新计算。
"""

import tarfile
from pathlib import Path
from typing import Tuple, Union

from .build_context import BuildIOError

DEFAULT_MODE = 0o644
EXECUTABLE_MODE = 0o755

HEADER_FORMAT = tarfile.GNU_FORMAT
HEADER_ENCODING = "utf-8"


class TarHeaderBuilder:
    """Tar 头部构建器"""

    @staticmethod
    def from_bytes(content: bytes, name: str = "") -> tarfile.TarInfo:
        """根据内存中的内容构建头部

        Args:
            content: 条目内容
            name: 包内名称（可在写入前通过 seal 重新设置）

        Returns:
            tarfile.TarInfo: 已计算校验和的头部
        """
        header = tarfile.TarInfo(name)
        header.size = len(content)
        header.uid = 0
        header.gid = 0
        header.uname = ""
        header.gname = ""
        header.mtime = 0
        header.type = tarfile.REGTYPE
        header.mode = DEFAULT_MODE
        header.chksum = TarHeaderBuilder.compute_checksum(header)
        return header

    @staticmethod
    def from_file(path: Union[str, Path], name: str = "") -> Tuple[tarfile.TarInfo, bytes]:
        """读取整个文件并构建头部

        Raises:
            BuildIOError: 文件无法打开或读取
        """
        try:
            with open(path, 'rb') as f:
                content = f.read()
        except OSError as e:
            raise BuildIOError(f"无法打开 {path}: {e}") from e

        return TarHeaderBuilder.from_bytes(content, name), content

    @staticmethod
    def set_mode(header: tarfile.TarInfo, mode: int) -> tarfile.TarInfo:
        """修改权限位并重新计算校验和"""
        header.mode = mode
        header.chksum = TarHeaderBuilder.compute_checksum(header)
        return header

    @staticmethod
    def seal(header: tarfile.TarInfo, name: str) -> tarfile.TarInfo:
        """设置包内名称并重新计算校验和"""
        header.name = name
        header.chksum = TarHeaderBuilder.compute_checksum(header)
        return header

    @staticmethod
    def compute_checksum(header: tarfile.TarInfo) -> int:
        """计算头部校验和

        校验和字段按 8 个空格参与计算。对于超长名称，GNU 格式会在真正的
        头部之前插入 LongLink 块，这里只取最后一个 512 字节块。
        """
        # tobuf 只包含头部块（不含内容），最后一块即条目自身的头部
        block = TarHeaderBuilder.header_block(header)[-tarfile.BLOCKSIZE:]
        unsigned, _signed = tarfile.calc_chksums(block)
        return unsigned

    @staticmethod
    def header_block(header: tarfile.TarInfo) -> bytes:
        """返回头部写入归档时的原始字节"""
        return header.tobuf(HEADER_FORMAT, HEADER_ENCODING, "surrogateescape")
