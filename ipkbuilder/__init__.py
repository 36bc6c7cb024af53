"""
ipkbuilder - IPK 安装包构建工具

Builds IPK packages (control.tar.gz + data.tar.gz + debian_binary) for
OpenWrt-style embedded Linux systems.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .config.schema import PackageSpec, ScriptEntry, ScriptSource
from .build.builder import Builder, make_package

__all__ = ["PackageSpec", "ScriptEntry", "ScriptSource", "Builder", "make_package", "__version__"]
