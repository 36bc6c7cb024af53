"""
构建器主类

负责整个构建流程的协调，使用管道模式组织构建步骤。
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..config.schema import PackageSpec
from .build_pipeline import BuildPipeline
from .build_context import BuildError, ProgressCallback


@dataclass
class BuildResult:
    """构建结果"""
    success: bool
    output_path: Optional[Path] = None
    output_size: Optional[int] = None
    build_time: Optional[float] = None
    control_entries: List[str] = field(default_factory=list)
    error: Optional[str] = None
    error_type: Optional[str] = None


class Builder:
    """IPK 安装包构建器

    使用管道模式协调构建步骤，提供统一的构建接口。
    同一输出目录上的构建必须由调用方串行化。
    """

    def __init__(self):
        self.pipeline = BuildPipeline()

    def build(
        self,
        spec: PackageSpec,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> BuildResult:
        """构建安装包

        失败时不抛出 BuildError，而是返回 success=False 的结果，
        error 中是可直接展示给用户的错误信息。
        """
        try:
            context = self.pipeline.execute(spec, progress_callback)
        except BuildError as e:
            return BuildResult(
                success=False,
                error=str(e),
                error_type=type(e).__name__,
            )

        build_time = context.build_stats['end_time'] - context.build_stats['start_time']
        return BuildResult(
            success=True,
            output_path=context.package_path,
            output_size=context.build_stats.get('package_size'),
            build_time=build_time,
            control_entries=list(context.build_stats.get('control_entries', [])),
        )

    def get_pipeline(self) -> BuildPipeline:
        """获取构建管道，用于自定义构建流程"""
        return self.pipeline

    def validate_build_pipeline(self) -> List[str]:
        """验证构建管道的完整性"""
        return self.pipeline.validate_pipeline()


def make_package(spec: PackageSpec, progress_callback: Optional[ProgressCallback] = None) -> Path:
    """构建安装包并返回其绝对路径

    Raises:
        BuildError: 构建失败
    """
    context = BuildPipeline().execute(spec, progress_callback)
    return context.package_path
