"""
ChmlFrp 命令行工具

使用示例:
    # 下载并安装 chmlfrp（默认命令）
    chmlfrp
    chmlfrp init

    # 选择节点和隧道，生成 frpc.ini
    chmlfrp cfg

    # 启动 frpc
    chmlfrp run

    # 其他
    chmlfrp clear
    chmlfrp rm
    chmlfrp nodes
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import NoReturn

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .api import ChmlFrpApi
from .config import Settings
from .credentials import CredentialStore
from .exceptions import ChmlFrpError
from .installer import Installer
from .launcher import launch
from .selection import choose_node, choose_tunnel, choose_tunnels, group_by_node

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """配置日志"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def fail(error: Exception) -> NoReturn:
    console.print(f"[red]✗[/red] {error}")
    sys.exit(1)


@click.group(invoke_without_command=True)
@click.option(
    "--root",
    "-r",
    type=click.Path(file_okay=False, path_type=Path),
    help="安装根目录（默认当前目录）",
)
@click.option("--verbose", "-v", is_flag=True, help="详细日志")
@click.version_option(version=__version__)
@click.pass_context
def main(ctx: click.Context, root: Path | None, verbose: bool):
    """ChmlFrp 安装/配置工具，不带命令时执行 init"""
    setup_logging(verbose)
    ctx.obj = Settings(root_dir=root) if root else Settings()

    if ctx.invoked_subcommand is None:
        ctx.invoke(init)


@main.command()
@click.pass_obj
def init(settings: Settings):
    """输入凭据，下载并安装 chmlfrp"""
    try:
        CredentialStore(settings.root_dir).get(reset=True)
        console.print("[green]正在准备 chmlfrp...[/green]")
        stable = asyncio.run(Installer(settings, console=console).init())
    except ChmlFrpError as e:
        fail(e)

    if stable is None:
        console.print(f"[yellow]![/yellow] 没有找到 {settings.release_prefix}* 目录，安装目录未更新")
    else:
        console.print(f"[green]✓[/green] 搞定！安装目录: {stable}")


@main.command()
@click.pass_obj
def cfg(settings: Settings):
    """选择节点和隧道，写入 frpc.ini"""

    async def configure() -> Path | None:
        credentials = CredentialStore(settings.root_dir).get()
        async with ChmlFrpApi(settings) as api:
            tunnels = await api.list_tunnels(credentials.token)
            if not tunnels:
                return None

            grouped = group_by_node(tunnels)
            node = choose_node(console, grouped)
            selected = choose_tunnels(console, grouped[node])
            ini_text = await api.fetch_config(
                credentials.token, node, [tunnel.name for tunnel in selected]
            )
        return Installer(settings, console=console).write_config(ini_text)

    try:
        config_file = asyncio.run(configure())
    except ChmlFrpError as e:
        fail(e)

    if config_file is None:
        console.print("[dim]没有隧道，请先在 ChmlFrp 控制台创建隧道[/dim]")
    else:
        console.print(f"[green]✓[/green] 配置文件写入成功: {config_file}")


@main.command()
@click.pass_obj
def run(settings: Settings):
    """启动 chmlfrp"""
    console.print("[yellow]正在运行 chmlfrp[/yellow]")
    try:
        code = launch(settings.install_dir, settings.config_file)
    except ChmlFrpError as e:
        fail(e)
    sys.exit(code)


@main.command()
@click.pass_obj
def clear(settings: Settings):
    """清除下载缓存"""
    try:
        removed = Installer(settings, console=console).clear_cache()
    except ChmlFrpError as e:
        fail(e)

    if removed:
        console.print("[green]✓[/green] 缓存已清除")
    else:
        console.print("[yellow]缓存已经空了哦[/yellow]")


@main.command()
@click.option("--yes", "-y", is_flag=True, help="跳过确认")
@click.pass_obj
def rm(settings: Settings, yes: bool):
    """选择并删除一个远程隧道"""

    async def remove() -> str | None:
        credentials = CredentialStore(settings.root_dir).get()
        async with ChmlFrpApi(settings) as api:
            tunnels = await api.list_tunnels(credentials.token)
            if not tunnels:
                return None

            tunnel = choose_tunnel(console, tunnels)
            if not yes and not click.confirm(f"确定删除隧道 {tunnel.name}?"):
                return None
            await api.delete_tunnel(credentials.token, tunnel.id, credentials.user_id)
        return tunnel.name

    try:
        removed = asyncio.run(remove())
    except ChmlFrpError as e:
        fail(e)

    if removed:
        console.print(f"[green]✓[/green] 隧道已删除: {removed}")
    else:
        console.print("[dim]没有删除任何隧道[/dim]")


@main.command()
@click.pass_obj
def nodes(settings: Settings):
    """列出全部节点"""

    async def fetch_nodes():
        async with ChmlFrpApi(settings) as api:
            return await api.list_nodes()

    try:
        node_list = asyncio.run(fetch_nodes())
    except ChmlFrpError as e:
        fail(e)

    if not node_list:
        console.print("[dim]没有节点[/dim]")
        return

    table = Table(title="节点列表")
    table.add_column("ID", justify="right")
    table.add_column("名称", style="cyan")
    table.add_column("地区")
    table.add_column("分组")
    table.add_column("UDP")
    table.add_column("建站")

    for node in node_list:
        table.add_row(
            str(node.id),
            node.name,
            node.area,
            node.nodegroup,
            str(node.udp if node.udp is not None else "-"),
            str(node.web if node.web is not None else "-"),
        )

    console.print(table)


if __name__ == "__main__":
    main()
