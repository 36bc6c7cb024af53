"""
构建管道模块

使用管道模式按固定顺序执行构建步骤：
预检 -> 控制归档 -> 数据归档 -> 组装 -> 清理。任一步骤失败即中止后续步骤。
"""

import time
from typing import List, Optional

from ..config.schema import PackageSpec
from ..utils import format_size
from ..utils.logging import info, success, debug, warning, error, LogStage
from .build_context import BuildContext, BuildError, ProgressCallback
from .steps.build_step import BuildStep
from .steps.validation_step import ValidationStep
from .steps.control_archive_step import ControlArchiveStep
from .steps.data_archive_step import DataArchiveStep
from .steps.package_assembly_step import PackageAssemblyStep
from .steps.cleanup_step import CleanupStep


class BuildPipeline:
    """构建管道，负责协调构建步骤的执行"""

    def __init__(self):
        self._steps: List[BuildStep] = []
        self._init_default_steps()

    def _init_default_steps(self):
        """初始化默认的构建步骤"""
        self._steps = [
            ValidationStep(),
            ControlArchiveStep(),
            DataArchiveStep(),
            PackageAssemblyStep(),
            CleanupStep(),
        ]

    def add_step(self, step: BuildStep, position: Optional[int] = None):
        """添加构建步骤"""
        if position is None:
            self._steps.append(step)
        else:
            self._steps.insert(position, step)

    def remove_step(self, step_name: str):
        """移除构建步骤"""
        self._steps = [step for step in self._steps if step.name != step_name]

    def get_steps(self) -> List[BuildStep]:
        """获取所有构建步骤"""
        return self._steps.copy()

    def execute(
        self,
        spec: PackageSpec,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> BuildContext:
        """执行构建管道

        Args:
            spec: 包描述快照
            progress_callback: 进度回调函数

        Returns:
            BuildContext: 构建上下文，包含所有构建结果

        Raises:
            BuildError: 构建失败（PackageError / BuildIOError / ArchiveError 原样抛出）
        """
        context = BuildContext(spec=spec, progress_callback=progress_callback)
        context.build_stats['start_time'] = time.time()

        try:
            info(f"开始构建安装包: {spec.output_path}", stage=LogStage.INIT)
            debug(
                f"构建配置: data={spec.data_path} gzip_level={spec.compression_level} "
                f"package={spec.package_filename}",
                stage=LogStage.INIT,
            )

            for step in self._steps:
                info(f"执行步骤: {step.description}", stage=LogStage.INIT)
                step.execute(context)

            context.build_stats['end_time'] = time.time()
            build_time = context.build_stats['end_time'] - context.build_stats['start_time']

            success(f"安装包构建成功: {context.package_path}", stage=LogStage.DONE)
            info(f"构建时间: {build_time:.1f}秒")
            info(f"最终大小: {format_size(context.build_stats.get('package_size', 0))}")

            return context

        except Exception as e:
            context.build_stats['end_time'] = time.time()
            error(f"构建失败: {e}", stage=LogStage.DONE)

            if not context.package_complete:
                self._discard_partial_outputs(context)

            if isinstance(e, BuildError):
                raise
            raise BuildError(f"构建失败: {e}") from e

    def _discard_partial_outputs(self, context: BuildContext) -> None:
        """删除本次构建写出但未完成的文件（中间归档、不完整的安装包）"""
        for path in list(context.created_files):
            try:
                path.unlink()
                debug(f"已删除未完成的文件: {path}", stage=LogStage.CLEANUP)
            except FileNotFoundError:
                pass
            except OSError as e:
                warning(f"无法删除未完成的文件 {path}: {e}", stage=LogStage.CLEANUP)
            context.untrack(path)

    def validate_pipeline(self) -> List[str]:
        """验证构建管道的完整性

        Returns:
            List[str]: 验证错误列表，空列表表示验证通过
        """
        errors = []

        if not self._steps:
            errors.append("构建管道中没有步骤")
            return errors

        # 检查步骤的进度范围是否连续
        prev_end = 0
        for step in self._steps:
            start, end = step.get_progress_range()
            if start != prev_end:
                errors.append(f"步骤 '{step.name}' 的进度范围不连续: 期望起始 {prev_end}%, 实际 {start}%")
            if start >= end:
                errors.append(f"步骤 '{step.name}' 的进度范围无效: {start}% - {end}%")
            prev_end = end

        if prev_end != 100:
            errors.append(f"构建管道的总进度范围不是100%: {prev_end}%")

        return errors
