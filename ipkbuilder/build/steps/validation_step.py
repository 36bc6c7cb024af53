"""
构建预检步骤模块

在任何文件读写之前检查必填配置，缺失或无效时立即以 PackageError 失败，
错误信息中包含字段名。
"""

from typing import List

from ...utils import is_within
from ...utils.logging import info, success, debug, error, LogStage
from ...config.schema import PackageSpec, ScriptEntry, ScriptSource
from ipkbuilder.build.build_context import (
    BuildContext,
    PackageError,
    CONTROL_ARCHIVE_NAME,
    DATA_ARCHIVE_NAME,
)
from .build_step import BuildStep


def check_spec(spec: PackageSpec) -> List[str]:
    """检查包描述的必填项

    Returns:
        List[str]: 问题列表，空列表表示通过
    """
    problems = []

    if spec.output_path is None:
        problems.append("output_path: 未设置输出目录")
    elif spec.output_path.exists() and not spec.output_path.is_dir():
        problems.append(f"output_path: 不是目录: {spec.output_path}")

    if spec.package_filename in (CONTROL_ARCHIVE_NAME, DATA_ARCHIVE_NAME):
        problems.append(f"package_filename: 与中间文件同名: {spec.package_filename}")

    if spec.data_path is None:
        problems.append("data_path: 未设置数据目录")
    elif not spec.data_path.exists():
        problems.append(f"data_path: 目录不存在: {spec.data_path}")
    elif not spec.data_path.is_dir():
        problems.append(f"data_path: 不是目录: {spec.data_path}")
    elif spec.output_path is not None:
        # 中间文件和安装包不能写进正在打包的目录
        if is_within(spec.output_path, spec.data_path):
            problems.append(f"output_path: 位于数据目录之内: {spec.output_path}")

    problems.extend(_check_entry('control', spec.control))
    problems.extend(_check_entry('debian_binary', spec.debian_binary))
    for name, entry in spec.lifecycle_scripts().items():
        if entry.enabled:
            problems.extend(_check_entry(name, entry))

    return problems


def _check_entry(field_name: str, entry: ScriptEntry) -> List[str]:
    if entry.source != ScriptSource.PATH:
        return []
    if entry.path is None:
        return [f"{field_name}.path: 未设置文件路径"]
    if not entry.path.is_file():
        return [f"{field_name}.path: 文件不存在: {entry.path}"]
    return []


class ValidationStep(BuildStep):
    """构建预检步骤"""

    def __init__(self):
        super().__init__("validate", "检查包描述")

    def get_progress_range(self) -> tuple[int, int]:
        return (0, 5)

    def execute(self, context: BuildContext) -> None:
        """检查必填字段并确定输出路径"""
        info("检查包描述", stage=LogStage.VALIDATE)

        problems = check_spec(context.spec)
        if problems:
            for problem in problems:
                error(problem, stage=LogStage.VALIDATE)
            raise PackageError("包描述不完整: " + "; ".join(problems))

        spec = context.spec
        output_dir = spec.output_path.resolve()
        context.output_dir = output_dir
        context.control_archive_path = output_dir / CONTROL_ARCHIVE_NAME
        context.data_archive_path = output_dir / DATA_ARCHIVE_NAME
        context.package_path = output_dir / spec.package_filename

        enabled = [name for name, entry in spec.lifecycle_scripts().items() if entry.enabled]
        debug(f"启用的脚本: {enabled or '无'}", stage=LogStage.VALIDATE)
        debug(f"输出包: {context.package_path}", stage=LogStage.VALIDATE)

        context.report("检查包描述", self.get_progress_range()[1], "包描述检查通过")
        success("包描述检查通过", stage=LogStage.VALIDATE)
