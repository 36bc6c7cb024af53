"""配置和 Schema 模块

提供 YAML 包描述文件的加载、验证和保存功能。
"""

from .schema import PackageSpec, ScriptEntry, ScriptSource
from .loader import (
    ConfigLoader,
    ConfigValidationError,
    ConfigError,
    ValidationResult,
    load_spec,
    validate_spec,
    validate_spec_with_result,
    save_spec,
    config_loader
)

__all__ = [
    # 主要类
    "PackageSpec",
    "ScriptEntry",
    "ScriptSource",
    "ConfigLoader",
    "ValidationResult",

    # 异常类
    "ConfigError",
    "ConfigValidationError",

    # 便捷函数
    "load_spec",
    "validate_spec",
    "validate_spec_with_result",
    "save_spec",

    # 单例
    "config_loader",
]
