"""
构建步骤基类模块

每个步骤读写同一个 BuildContext，并独占一段连续的进度范围。
"""

from abc import ABC, abstractmethod

from ipkbuilder.build.build_context import BuildContext


class BuildStep(ABC):
    """构建步骤抽象基类"""

    def __init__(self, name: str, description: str):
        self.name = name
        self.description = description

    @abstractmethod
    def execute(self, context: BuildContext) -> None:
        """执行构建步骤

        Raises:
            BuildError: 步骤失败（具体子类说明失败原因）
        """
        pass

    @abstractmethod
    def get_progress_range(self) -> tuple[int, int]:
        """获取此步骤的进度范围 (start_percent, end_percent)"""
        pass

    def progress_at(self, done: int, total: int) -> int:
        """把步骤内的完成数量换算为整体进度百分比"""
        start, end = self.get_progress_range()
        if total <= 0:
            return end
        return start + int((min(done, total) / total) * (end - start))
