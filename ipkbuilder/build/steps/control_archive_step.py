"""
控制归档构建步骤模块

生成 control.tar.gz：总是包含 control，随后按固定顺序写入启用的
postinst、preinst、prerm。未启用的脚本直接跳过，不留占位。
"""

import tarfile
import zlib

from ...utils import ensure_directory, format_mode, format_size
from ...utils.logging import info, success, debug, error, LogStage
from ipkbuilder.build.build_context import BuildContext, BuildError, ArchiveError, BuildIOError
from ipkbuilder.build.archive import open_gzip_tar, append_entry
from ipkbuilder.build.resolver import ScriptResolver
from .build_step import BuildStep


class ControlArchiveStep(BuildStep):
    """控制归档构建步骤"""

    def __init__(self):
        super().__init__("control", "构建控制归档")
        self.resolver = ScriptResolver()

    def get_progress_range(self) -> tuple[int, int]:
        return (5, 25)

    def execute(self, context: BuildContext) -> None:
        """写入 control.tar.gz"""
        if context.control_archive_path is None:
            raise BuildError("缺少必要的构建数据: 控制归档路径未确定")

        spec = context.spec
        archive_path = context.control_archive_path
        progress_start, progress_end = self.get_progress_range()

        info(f"构建控制归档: {archive_path}", stage=LogStage.CONTROL)
        context.report("构建控制归档", progress_start, "写入 control...")

        try:
            ensure_directory(archive_path.parent)
        except OSError as e:
            raise BuildIOError(f"无法创建输出目录 {archive_path.parent}: {e}") from e

        written = []
        try:
            context.track(archive_path)
            with open_gzip_tar(archive_path, spec.compression_level, stage=LogStage.CONTROL) as archive:
                header, payload = self.resolver.resolve(spec.control, "control")
                append_entry(archive, "control", header, payload)
                written.append(("control", header.mode, len(payload)))

                for name, entry in spec.lifecycle_scripts().items():
                    if not entry.enabled:
                        debug(f"跳过未启用的脚本: {name}", stage=LogStage.CONTROL)
                        continue
                    header, payload = self.resolver.resolve(entry, name, force_executable_if_inline=True)
                    append_entry(archive, name, header, payload)
                    written.append((name, header.mode, len(payload)))

            # with 块退出时已写入 tar 结束块并刷新 gzip 尾部
        except BuildError as e:
            error(f"构建控制归档失败: {e}", stage=LogStage.CONTROL)
            raise
        except (OSError, zlib.error, tarfile.TarError) as e:
            error(f"构建控制归档失败: {e}", stage=LogStage.CONTROL)
            raise ArchiveError(f"构建控制归档失败 {archive_path}: {e}") from e

        context.build_stats['control_entries'] = [name for name, _mode, _size in written]
        for name, mode, size in written:
            debug(f"  {name} mode={format_mode(mode)} size={size}", stage=LogStage.CONTROL)

        context.report("构建控制归档", progress_end, f"写入 {len(written)} 个条目")
        success(
            f"控制归档构建完成 - 条目: {len(written)}, 大小: {format_size(archive_path.stat().st_size)}",
            stage=LogStage.CONTROL,
        )
