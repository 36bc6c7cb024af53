"""
配置 Schema 定义

使用 Pydantic 定义包描述模型。PackageSpec 是一次构建的不可变快照：
前端（YAML 文件、命令行）只负责填充它，构建核心只读取它。
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field, field_validator


DEFAULT_CONTROL_TEXT = (
    "Package: example_package\n"
    "Version: 1.3.3.7\n"
    "Architecture: varam335x\n"
    "Maintainer: user@domain.tld\n"
    "Description: This is an example\n"
    "Priority: optional\n"
    "Depends: other_package\n"
)
DEFAULT_SCRIPT_TEXT = "#!/bin/bash\n"
DEFAULT_DEBIAN_BINARY_TEXT = "2.0"
DEFAULT_PACKAGE_FILENAME = "outpackage.ipk"


class ScriptSource(str, Enum):
    """条目内容来源枚举"""
    PATH = "path"
    TEXT = "text"


class ScriptEntry(BaseModel):
    """单个"文件或文本"条目

    source 为 path 时内容在构建时从 path 读取，为 text 时直接使用 text
    （UTF-8 编码）。enabled 只对生命周期脚本有效。
    """
    source: ScriptSource = Field(ScriptSource.PATH, description="内容来源")
    path: Optional[Path] = Field(None, description="内容文件路径（source=path 时使用）")
    text: str = Field("", description="内联文本（source=text 时使用）")
    enabled: bool = Field(False, description="是否写入包中（control/debian_binary 忽略此项）")

    model_config = {
        "extra": "forbid",
        "frozen": True,
    }

    @field_validator('path', mode='before')
    @classmethod
    def validate_path(cls, v: Any) -> Any:
        """空字符串视为未设置"""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @classmethod
    def from_path(cls, path: Union[str, Path], enabled: bool = True) -> 'ScriptEntry':
        return cls(source=ScriptSource.PATH, path=Path(path), enabled=enabled)

    @classmethod
    def from_text(cls, text: str, enabled: bool = True) -> 'ScriptEntry':
        return cls(source=ScriptSource.TEXT, text=text, enabled=enabled)

    @property
    def is_inline(self) -> bool:
        return self.source == ScriptSource.TEXT


def _default_control() -> ScriptEntry:
    return ScriptEntry(source=ScriptSource.PATH, text=DEFAULT_CONTROL_TEXT, enabled=True)


def _default_debian_binary() -> ScriptEntry:
    return ScriptEntry(source=ScriptSource.TEXT, text=DEFAULT_DEBIAN_BINARY_TEXT, enabled=True)


def _default_script() -> ScriptEntry:
    return ScriptEntry(source=ScriptSource.PATH, text=DEFAULT_SCRIPT_TEXT, enabled=False)


class PackageSpec(BaseModel):
    """IPK 包描述

    这是整个包描述文件的根模型。data_path / output_path 在模型层面允许为空，
    是否齐全由构建前的预检步骤负责检查。
    """

    control: ScriptEntry = Field(default_factory=_default_control, description="control 文件")
    debian_binary: ScriptEntry = Field(default_factory=_default_debian_binary, description="debian_binary 版本标记")
    postinst: ScriptEntry = Field(default_factory=_default_script, description="postinst 脚本")
    preinst: ScriptEntry = Field(default_factory=_default_script, description="preinst 脚本")
    prerm: ScriptEntry = Field(default_factory=_default_script, description="prerm 脚本")

    data_path: Optional[Path] = Field(None, description="数据目录（映射到包内根目录）")
    output_path: Optional[Path] = Field(None, description="输出目录")

    package_filename: str = Field(DEFAULT_PACKAGE_FILENAME, description="输出包文件名", min_length=1)
    compression_level: int = Field(6, description="gzip 压缩级别", ge=1, le=9)

    model_config = {
        "extra": "forbid",  # 禁止额外字段
        "frozen": True,  # 每次构建使用不可变快照
        "str_strip_whitespace": False,  # 内联文本必须原样保留
    }

    @field_validator('data_path', 'output_path', mode='before')
    @classmethod
    def validate_directory(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('package_filename')
    @classmethod
    def validate_package_filename(cls, v: str) -> str:
        """包文件名不能包含路径分隔符"""
        if '/' in v or '\\' in v or v in ('.', '..'):
            raise ValueError("包文件名不能包含路径分隔符")
        return v

    def with_updates(self, **changes: Any) -> 'PackageSpec':
        """返回修改了部分字段的新快照（经过完整验证）"""
        data = self.model_dump()
        data.update(changes)
        return PackageSpec.model_validate(data)

    def lifecycle_scripts(self) -> Dict[str, ScriptEntry]:
        """按固定顺序返回生命周期脚本"""
        return {
            'postinst': self.postinst,
            'preinst': self.preinst,
            'prerm': self.prerm,
        }

    def to_dict(self) -> Dict[str, Any]:
        """转换为可写入 YAML 的字典"""
        data = self.model_dump(exclude_none=True)

        def convert_values(obj):
            if isinstance(obj, dict):
                return {k: convert_values(v) for k, v in obj.items()}
            elif isinstance(obj, list):
                return [convert_values(item) for item in obj]
            elif isinstance(obj, Path):
                return obj.as_posix()
            elif isinstance(obj, Enum):
                return obj.value
            else:
                return obj

        return convert_values(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PackageSpec':
        """从字典创建包描述实例"""
        return cls.model_validate(data)
