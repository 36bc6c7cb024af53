"""
ipkbuilder CLI 主入口

提供命令行接口，支持 build/validate/inspect/example 等命令。
"""

from typing import Optional

import typer
from rich.console import Console

from .. import __version__
from ..utils.logging import set_log_level, OutputLevel
from .commands import build, validate, inspect


# 创建主应用
app = typer.Typer(
    name="ipkbuilder",
    help="ipkbuilder - IPK 安装包构建工具",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# 控制台输出
console = Console()


def version_callback(value: bool) -> None:
    """显示版本信息"""
    if value:
        console.print(f"ipkbuilder v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="显示版本信息"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="启用详细输出"
    )
) -> None:
    """ipkbuilder - IPK 安装包构建工具

    使用 --help 查看可用命令的详细信息。
    """
    set_log_level(OutputLevel.DEBUG if verbose else OutputLevel.INFO)


# 注册子命令
app.command("build", help="构建安装包")(build.build_command)
app.command("validate", help="验证包描述文件")(validate.validate_command)
app.command("inspect", help="检查安装包内容")(inspect.inspect_command)


@app.command("example")
def example_command(
    output: str = typer.Option(
        "package.yaml",
        "--output", "-o",
        help="输出包描述文件路径"
    )
) -> None:
    """生成示例包描述文件"""
    from ..config import save_spec, ConfigError
    from ..config.schema import PackageSpec, ScriptEntry

    spec = PackageSpec(
        control=ScriptEntry.from_text(
            "Package: example_package\n"
            "Version: 1.0.0\n"
            "Architecture: all\n"
            "Maintainer: user@domain.tld\n"
            "Description: This is an example\n"
        ),
        postinst=ScriptEntry.from_text("#!/bin/sh\nexit 0\n", enabled=True),
        data_path="./rootfs",
        output_path="./dist",
    )

    try:
        save_spec(spec, output)
    except ConfigError as e:
        console.print(f"[red]生成示例包描述失败: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"✓ 示例包描述文件已生成: [green]{output}[/green]")
    console.print("请根据需要修改文件，然后运行:")
    console.print(f"  [cyan]ipkbuilder build -c {output}[/cyan]")


if __name__ == "__main__":
    app()
