"""
包描述加载器

负责从 YAML 文件加载包描述并进行验证。
"""

import copy
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .schema import PackageSpec


class ConfigError(Exception):
    """配置错误基类"""
    pass


class ConfigValidationError(ConfigError):
    """配置验证错误"""

    def __init__(self, message: str, errors: List[Dict[str, Any]]):
        super().__init__(message)
        self.errors = errors

    def format_errors(self) -> str:
        """格式化错误信息为人类可读的格式"""
        formatted = []
        for error in self.errors:
            loc = " -> ".join(str(item) for item in error.get('loc', []))
            msg = error.get('msg', '未知错误')
            input_val = error.get('input', '')

            if loc:
                formatted.append(f"字段 '{loc}': {msg}")
                if input_val:
                    formatted.append(f"  输入值: {input_val}")
            else:
                formatted.append(f"根级别: {msg}")

        return "\n".join(formatted)

    def format_errors_json(self) -> str:
        """格式化错误信息为 JSON 格式"""
        return json.dumps(self.errors, ensure_ascii=False, indent=2, default=str)


@dataclass
class ValidationResult:
    """包描述验证结果"""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    spec: Optional[PackageSpec] = None


# 需要按描述文件所在目录解析的路径字段
_DIRECTORY_FIELDS = ('data_path', 'output_path')
_ENTRY_FIELDS = ('control', 'debian_binary', 'postinst', 'preinst', 'prerm')


class ConfigLoader:
    """包描述加载器"""

    def __init__(self):
        self.yaml = YAML()
        self.yaml.preserve_quotes = True
        self.yaml.width = 4096  # 避免长行自动换行

    def load_from_file(self, config_path: Union[str, Path]) -> PackageSpec:
        """从文件加载包描述

        Args:
            config_path: 描述文件路径

        Returns:
            PackageSpec: 验证后的包描述

        Raises:
            ConfigError: 加载或验证错误
        """
        config_path = Path(config_path)

        if not config_path.exists():
            raise ConfigError(f"配置文件不存在: {config_path}")

        if not config_path.is_file():
            raise ConfigError(f"配置路径不是文件: {config_path}")

        if config_path.suffix.lower() not in ['.yaml', '.yml']:
            raise ConfigError(f"配置文件必须是 .yaml 或 .yml 格式: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                raw_data = self.yaml.load(f)
        except YAMLError as e:
            raise ConfigError(f"YAML 解析错误: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"文件读取错误: {e}") from e

        if raw_data is None:
            raise ConfigError("配置文件为空")

        if not isinstance(raw_data, dict):
            raise ConfigError("配置文件根级别必须是对象/字典格式")

        return self.load_from_dict(_plain(raw_data), config_path.parent.resolve())

    def load_from_dict(self, data: Dict[str, Any], base_path: Optional[Path] = None) -> PackageSpec:
        """从字典加载包描述

        Args:
            data: 描述数据字典
            base_path: 相对路径的基准路径

        Raises:
            ConfigValidationError: 验证错误
        """
        if base_path:
            # 创建数据副本避免修改原数据
            data = copy.deepcopy(data)
            self._resolve_relative_paths(data, base_path)

        try:
            return PackageSpec.from_dict(data)
        except ValidationError as e:
            raise ConfigValidationError("配置验证失败", list(e.errors())) from e

    def save_to_file(self, spec: PackageSpec, output_path: Union[str, Path]) -> None:
        """保存包描述到文件

        Raises:
            ConfigError: 保存错误
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(output_path, 'w', encoding='utf-8') as f:
                self.yaml.dump(spec.to_dict(), f)
        except (OSError, YAMLError) as e:
            raise ConfigError(f"保存配置文件失败: {e}") from e

    def validate_file(self, config_path: Union[str, Path]) -> List[Dict[str, Any]]:
        """验证描述文件并返回错误列表，空列表表示验证通过"""
        try:
            self.load_from_file(config_path)
            return []
        except ConfigValidationError as e:
            return e.errors
        except ConfigError as e:
            return [{
                'loc': [],
                'msg': str(e),
                'type': 'config_error'
            }]

    def _resolve_relative_paths(self, data: Dict[str, Any], base_path: Path) -> None:
        """把描述中的相对路径解析为相对于描述文件目录的绝对路径"""
        for key in _DIRECTORY_FIELDS:
            data[key] = _resolve(data.get(key), base_path)

        for key in _ENTRY_FIELDS:
            entry = data.get(key)
            if isinstance(entry, dict) and 'path' in entry:
                entry['path'] = _resolve(entry['path'], base_path)


def _resolve(value: Any, base_path: Path) -> Any:
    if isinstance(value, str) and value.strip():
        path_obj = Path(value).expanduser()
        if not path_obj.is_absolute():
            return str((base_path / path_obj).resolve())
        return str(path_obj)
    return value


def _plain(obj: Any) -> Any:
    """把 ruamel 的 CommentedMap/CommentedSeq 转成普通容器"""
    if isinstance(obj, dict):
        return {str(k): _plain(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_plain(item) for item in obj]
    if isinstance(obj, str):
        return str(obj)
    return obj


# 全局加载器实例
config_loader = ConfigLoader()


def load_spec(config_path: Union[str, Path]) -> PackageSpec:
    """便捷函数：加载包描述文件"""
    return config_loader.load_from_file(config_path)


def validate_spec(config_path: Union[str, Path]) -> List[Dict[str, Any]]:
    """便捷函数：验证包描述文件"""
    return config_loader.validate_file(config_path)


def validate_spec_with_result(spec_or_path: Union[PackageSpec, str, Path]) -> ValidationResult:
    """验证包描述并返回详细结果"""
    try:
        if isinstance(spec_or_path, (str, Path)):
            spec = load_spec(spec_or_path)
        else:
            spec = spec_or_path
        return ValidationResult(is_valid=True, spec=spec)

    except ConfigValidationError as e:
        error_messages = []
        for error in e.errors:
            loc = " -> ".join(str(item) for item in error.get('loc', []))
            msg = error.get('msg', '未知错误')
            if loc:
                error_messages.append(f"字段 '{loc}': {msg}")
            else:
                error_messages.append(f"根级别: {msg}")
        return ValidationResult(is_valid=False, errors=error_messages)

    except ConfigError as e:
        return ValidationResult(is_valid=False, errors=[f"配置加载失败: {e}"])


def save_spec(spec: PackageSpec, output_path: Union[str, Path]) -> None:
    """便捷函数：保存包描述文件"""
    config_loader.save_to_file(spec, output_path)
