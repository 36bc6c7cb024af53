"""
数据归档构建步骤模块

生成 data.tar.gz：原样镜像数据目录的结构与磁盘权限。
"""

import tarfile
import zlib

from ...utils import format_size
from ...utils.logging import info, success, debug, error, LogStage
from ipkbuilder.build.build_context import BuildContext, BuildError, ArchiveError, BuildIOError
from ipkbuilder.build.archive import open_gzip_tar
from ipkbuilder.build.collector import DataCollector
from .build_step import BuildStep


class DataArchiveStep(BuildStep):
    """数据归档构建步骤"""

    def __init__(self):
        super().__init__("data", "构建数据归档")
        self.collector = DataCollector()

    def get_progress_range(self) -> tuple[int, int]:
        return (25, 70)

    def execute(self, context: BuildContext) -> None:
        """写入 data.tar.gz"""
        if context.data_archive_path is None or context.spec.data_path is None:
            raise BuildError("缺少必要的构建数据: 数据目录或数据归档路径未确定")

        data_path = context.spec.data_path
        archive_path = context.data_archive_path
        progress_start, progress_end = self.get_progress_range()

        info(f"构建数据归档: {data_path} -> {archive_path}", stage=LogStage.DATA)
        context.report("构建数据归档", progress_start, f"扫描: {data_path}")

        try:
            entries = self.collector.collect(data_path)
        except BuildError as e:
            error(f"扫描数据目录失败: {e}", stage=LogStage.DATA)
            raise

        total = len(entries)
        try:
            context.track(archive_path)
            with open_gzip_tar(archive_path, context.spec.compression_level, stage=LogStage.DATA) as archive:
                for index, entry in enumerate(entries):
                    try:
                        archive.add(str(entry.path), arcname=entry.arcname, recursive=False)
                    except OSError as e:
                        raise BuildIOError(f"无法读取 {entry.path}: {e}") from e

                    context.report("构建数据归档", self.progress_at(index + 1, total), f"打包: {entry.arcname}")
        except BuildError as e:
            error(f"构建数据归档失败: {e}", stage=LogStage.DATA)
            raise
        except (OSError, zlib.error, tarfile.TarError) as e:
            error(f"构建数据归档失败: {e}", stage=LogStage.DATA)
            raise ArchiveError(f"构建数据归档失败 {archive_path}: {e}") from e

        stats = self.collector.get_statistics()
        context.build_stats['data_entries'] = stats['total_items']
        context.build_stats['data_size'] = stats['total_size']

        # 在 DEBUG 级别输出前 20 个条目用于诊断
        for entry in entries[:20]:
            debug(f"  {entry.arcname} size={format_size(entry.size)}", stage=LogStage.DATA)
        if total > 20:
            debug(f"... 还有 {total - 20} 个条目未列出", stage=LogStage.DATA)

        context.report("构建数据归档", progress_end, f"写入 {total} 个条目")
        success("数据归档构建完成", stage=LogStage.DATA)
        info(f"  文件数量: {stats['total_files']}, 目录数量: {stats['total_directories']}")
        info(f"  原始大小: {format_size(stats['total_size'])}")
        info(f"  归档大小: {format_size(archive_path.stat().st_size)}")
