"""
Build 命令实现

构建 IPK 安装包的核心命令。
"""

import traceback
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from ...config import load_spec, ConfigError, ConfigValidationError
from ...utils import expand_path, format_size
from ...utils.logging import set_log_level, set_log_file, OutputLevel


console = Console()


def build_command(
    config: str = typer.Option(..., "--config", "-c", help="包描述文件路径"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="输出目录（覆盖包描述中的 output_path）"),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="数据目录（覆盖包描述中的 data_path）"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="日志输出文件"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出详细调试日志 (DEBUG 级别)"),
) -> None:
    """构建安装包

    从包描述文件构建 IPK 安装包。

    示例:
        ipkbuilder build -c package.yaml
        ipkbuilder build -c package.yaml -o dist -d rootfs
    """
    from ...build.builder import Builder

    config_path = Path(config)

    if verbose:
        set_log_level(OutputLevel.DEBUG)

    if log_file:
        try:
            set_log_file(log_file)
        except OSError:
            console.print(f"[yellow]无法写入日志文件: {log_file}[/yellow]")

    try:
        console.print(f"[cyan]正在加载包描述[/cyan]: {config_path}")
        spec = load_spec(config_path)
    except ConfigValidationError as e:
        console.print("[red]包描述验证失败:[/red]")
        console.print(e.format_errors(), markup=False)
        raise typer.Exit(1)
    except ConfigError as e:
        console.print(f"[red]配置错误[/red]: {e}")
        raise typer.Exit(1)

    # 命令行参数覆盖包描述中的目录
    overrides = {}
    if output:
        overrides['output_path'] = expand_path(output)
    if data:
        overrides['data_path'] = expand_path(data)
    if overrides:
        spec = spec.with_updates(**overrides)

    def progress_callback(stage: str, current: int, total: int, message: str = "") -> None:
        """进度回调函数，显示进度"""
        if verbose and total > 0:
            percentage = (current / total) * 100
            console.print(f"[blue]{stage}[/blue]: {message} ({percentage:.0f}%)", markup=True)

    console.print("[cyan]开始构建安装包...[/cyan]")
    try:
        result = Builder().build(spec, progress_callback=progress_callback)
    except Exception as e:
        console.print(f"[red]✗ 构建过程中发生意外错误[/red]: {e}")
        if log_file:
            console.print(f"[yellow]详细错误信息:[/yellow]\n{traceback.format_exc()}")
        raise typer.Exit(1)

    if not result.success:
        console.print(f"[red]✗ 构建失败[/red]: {result.error}")
        if log_file:
            console.print(f"[yellow]请检查日志文件 {log_file} 获取详细信息。[/yellow]")
        raise typer.Exit(1)

    console.print(f"[green]✓ 安装包构建完成[/green]: {result.output_path}")
    console.print(f"[blue]控制条目[/blue]: {', '.join(result.control_entries)}")
    if result.output_size is not None:
        console.print(f"[blue]文件大小[/blue]: {format_size(result.output_size)}")
