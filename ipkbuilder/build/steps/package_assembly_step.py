"""
安装包组装步骤模块

删除旧包后，把 control.tar.gz、data.tar.gz 和 debian_binary 按固定顺序
写入最终的 gzip tar 容器。
"""

import tarfile
import zlib

from ...utils import format_size
from ...utils.logging import info, success, debug, error, LogStage
from ipkbuilder.build.build_context import (
    BuildContext,
    BuildError,
    ArchiveError,
    PackageError,
    CONTROL_ARCHIVE_NAME,
    DATA_ARCHIVE_NAME,
    DEBIAN_BINARY_NAME,
)
from ipkbuilder.build.archive import open_gzip_tar, append_entry, append_file
from ipkbuilder.build.resolver import ScriptResolver
from .build_step import BuildStep


class PackageAssemblyStep(BuildStep):
    """安装包组装步骤"""

    def __init__(self):
        super().__init__("assemble", "组装最终安装包")
        self.resolver = ScriptResolver()

    def get_progress_range(self) -> tuple[int, int]:
        return (70, 95)

    def execute(self, context: BuildContext) -> None:
        """组装最终安装包"""
        if not context.package_path or not context.control_archive_path or not context.data_archive_path:
            raise BuildError("缺少必要的构建数据: 输出路径未确定")

        package_path = context.package_path
        progress_start, progress_end = self.get_progress_range()

        info(f"组装安装包: {package_path}", stage=LogStage.ASSEMBLE)
        context.report("组装安装包", progress_start, "删除旧安装包...")

        self._remove_previous_package(context)

        entries = []
        try:
            context.track(package_path)
            with open_gzip_tar(package_path, context.spec.compression_level, stage=LogStage.ASSEMBLE) as archive:
                size = append_file(archive, context.control_archive_path, CONTROL_ARCHIVE_NAME, stage=LogStage.ASSEMBLE)
                entries.append((CONTROL_ARCHIVE_NAME, size))

                size = append_file(archive, context.data_archive_path, DATA_ARCHIVE_NAME, stage=LogStage.ASSEMBLE)
                entries.append((DATA_ARCHIVE_NAME, size))

                header, payload = self.resolver.resolve(
                    context.spec.debian_binary, DEBIAN_BINARY_NAME, force_executable_if_inline=True
                )
                append_entry(archive, DEBIAN_BINARY_NAME, header, payload)
                entries.append((DEBIAN_BINARY_NAME, len(payload)))
        except BuildError as e:
            error(f"组装安装包失败: {e}", stage=LogStage.ASSEMBLE)
            raise
        except (OSError, zlib.error, tarfile.TarError) as e:
            error(f"组装安装包失败: {e}", stage=LogStage.ASSEMBLE)
            raise ArchiveError(f"组装安装包失败 {package_path}: {e}") from e

        # 安装包已完整写出，之后的失败不再回滚它
        context.package_complete = True
        context.untrack(package_path)

        final_size = package_path.stat().st_size
        context.build_stats['package_entries'] = [name for name, _size in entries]
        context.build_stats['package_size'] = final_size
        for name, size in entries:
            debug(f"  {name} size={format_size(size)}", stage=LogStage.ASSEMBLE)

        context.report("组装安装包", progress_end, f"完成，大小 {format_size(final_size)}")
        success(f"安装包组装完成 - 大小: {format_size(final_size)}", stage=LogStage.ASSEMBLE)

    def _remove_previous_package(self, context: BuildContext) -> None:
        """删除旧包；不存在时忽略，其他失败视为致命错误"""
        package_path = context.package_path
        try:
            package_path.unlink()
            debug(f"已删除旧安装包: {package_path}", stage=LogStage.ASSEMBLE)
        except FileNotFoundError:
            pass
        except OSError as e:
            error(f"删除旧安装包失败: {e}", stage=LogStage.ASSEMBLE)
            raise PackageError(f"创建安装包前无法删除 {package_path}: {e}") from e
