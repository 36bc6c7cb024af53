"""
Inspect 命令实现

检查 IPK 安装包内容的命令。
"""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ...build.build_context import BuildError
from ...build.inspector import PackageInfo, inspect_package
from ...utils import format_mode, format_size


console = Console()


def inspect_command(
    package: str = typer.Argument(..., help="安装包文件路径"),
    json_output: bool = typer.Option(False, "--json", help="输出 JSON 格式"),
    show_files: bool = typer.Option(False, "--files", help="显示数据归档中的文件列表"),
) -> None:
    """检查安装包内容

    显示顶层条目、控制归档条目、control 文件与 debian_binary 版本。

    示例:
        ipkbuilder inspect dist/outpackage.ipk
        ipkbuilder inspect dist/outpackage.ipk --files
    """
    package_path = Path(package)

    if not package_path.exists():
        console.print(f"[red]安装包不存在: {package_path}[/red]")
        raise typer.Exit(1)

    try:
        info = inspect_package(package_path)
    except BuildError as e:
        console.print(f"[red]检查安装包失败: {e}[/red]")
        raise typer.Exit(1)

    if json_output:
        console.print_json(json.dumps(info.to_dict(), ensure_ascii=False))
        return

    _display_package_info(info, show_files)


def _display_package_info(info: PackageInfo, show_files: bool) -> None:
    console.print(f"[bold]安装包[/bold]: {info.path}")
    console.print(f"[blue]格式版本[/blue]: {(info.debian_binary or '-').strip()}")
    console.print()

    table = Table(title="顶层条目")
    table.add_column("名称", style="cyan")
    table.add_column("权限", style="green")
    table.add_column("大小", justify="right")
    for entry in info.entries:
        table.add_row(entry.name, format_mode(entry.mode), format_size(entry.size))
    console.print(table)

    control_table = Table(title="控制归档")
    control_table.add_column("名称", style="cyan")
    control_table.add_column("权限", style="green")
    control_table.add_column("大小", justify="right")
    for member in info.control_members:
        control_table.add_row(member.name, format_mode(member.mode), format_size(member.size))
    console.print(control_table)

    if info.control:
        console.print("[bold]control[/bold]:")
        console.print(info.control, markup=False)

    file_count = sum(1 for m in info.data_members if not m.is_directory)
    console.print(f"[blue]数据归档[/blue]: {len(info.data_members)} 个条目, {file_count} 个文件")

    if show_files:
        data_table = Table(title="数据归档")
        data_table.add_column("路径", style="cyan")
        data_table.add_column("权限", style="green")
        data_table.add_column("大小", justify="right")
        for member in info.data_members:
            name = member.name + "/" if member.is_directory else member.name
            data_table.add_row(name, format_mode(member.mode), format_size(member.size))
        console.print(data_table)
