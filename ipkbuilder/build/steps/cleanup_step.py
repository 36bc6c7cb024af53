"""
清理步骤模块

安装包组装成功后删除 control.tar.gz 与 data.tar.gz 两个中间文件。
"""

from ...utils.logging import info, success, error, LogStage
from ipkbuilder.build.build_context import BuildContext, BuildIOError
from .build_step import BuildStep


class CleanupStep(BuildStep):
    """中间文件清理步骤"""

    def __init__(self):
        super().__init__("cleanup", "删除中间文件")

    def get_progress_range(self) -> tuple[int, int]:
        return (95, 100)

    def execute(self, context: BuildContext) -> None:
        """删除中间文件，失败为致命错误（已完成的安装包保留）"""
        info("删除中间文件", stage=LogStage.CLEANUP)

        for path in (context.control_archive_path, context.data_archive_path):
            if path is None:
                continue
            try:
                path.unlink()
            except OSError as e:
                error(f"删除中间文件失败: {path}: {e}", stage=LogStage.CLEANUP)
                raise BuildIOError(f"无法删除中间文件 {path}: {e}") from e
            context.untrack(path)

        context.report("删除中间文件", self.get_progress_range()[1], "清理完成")
        success("中间文件已删除", stage=LogStage.CLEANUP)
