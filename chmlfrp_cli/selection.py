"""
交互式选择

先在内存中建好索引，再用编号表格让用户选择，返回的是模型对象而不是显示文本。
"""

from typing import Sequence

import click
from rich.console import Console
from rich.table import Table

from .models import TunnelInfo


def group_by_node(tunnels: Sequence[TunnelInfo]) -> dict[str, list[TunnelInfo]]:
    """按节点名归类隧道，节点名按字母排序"""
    grouped: dict[str, list[TunnelInfo]] = {}
    for tunnel in tunnels:
        grouped.setdefault(tunnel.node, []).append(tunnel)
    return {node: grouped[node] for node in sorted(grouped)}


def parse_choices(text: str, count: int, multiple: bool = False) -> list[int]:
    """
    解析用户输入的编号（从 1 开始）

    支持 "2"，多选时还支持 "1,3"、"1-3"、"all"

    Returns:
        从 0 开始的下标列表（去重并保持输入顺序）

    Raises:
        ValueError: 输入无效或编号超出范围
    """
    text = text.strip().lower()
    if not text:
        raise ValueError("没有输入编号")

    if multiple and text in ("all", "*"):
        return list(range(count))

    indexes: list[int] = []
    for part in text.replace("，", ",").split(","):
        part = part.strip()
        if not part:
            continue
        if multiple and "-" in part:
            start_text, _, end_text = part.partition("-")
            start, end = int(start_text), int(end_text)
            if start > end:
                raise ValueError(f"无效的范围: {part}")
            numbers = range(start, end + 1)
        else:
            numbers = [int(part)]

        for number in numbers:
            if not 1 <= number <= count:
                raise ValueError(f"编号超出范围: {number}")
            if number - 1 not in indexes:
                indexes.append(number - 1)

    if not indexes:
        raise ValueError("没有输入编号")
    if not multiple and len(indexes) > 1:
        raise ValueError("只能选择一个")
    return indexes


def _prompt_indexes(message: str, count: int, multiple: bool) -> list[int]:
    while True:
        text = click.prompt(message)
        try:
            return parse_choices(text, count, multiple)
        except ValueError as e:
            click.echo(f"输入无效: {e}")


def _tunnel_table(title: str, tunnels: Sequence[TunnelInfo]) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("名称", style="cyan")
    table.add_column("类型")
    table.add_column("本地端口", justify="right")
    table.add_column("远程地址")
    table.add_column("状态")
    for number, tunnel in enumerate(tunnels, start=1):
        table.add_row(
            str(number),
            tunnel.name,
            tunnel.tunnel_type,
            str(tunnel.nport),
            tunnel.remote_address,
            str(tunnel.state),
        )
    return table


def choose_node(console: Console, grouped: dict[str, list[TunnelInfo]]) -> str:
    """选择一个节点，返回节点名"""
    nodes = list(grouped)
    table = Table(title="节点列表")
    table.add_column("#", justify="right")
    table.add_column("节点", style="cyan")
    table.add_column("隧道数", justify="right")
    for number, node in enumerate(nodes, start=1):
        table.add_row(str(number), node, str(len(grouped[node])))
    console.print(table)

    [index] = _prompt_indexes("选择一个节点", len(nodes), multiple=False)
    return nodes[index]


def choose_tunnels(console: Console, tunnels: Sequence[TunnelInfo]) -> list[TunnelInfo]:
    """选择一个或多个隧道"""
    console.print(_tunnel_table("隧道列表", tunnels))
    indexes = _prompt_indexes("选择隧道（如 1,3 或 1-3 或 all）", len(tunnels), multiple=True)
    return [tunnels[i] for i in indexes]


def choose_tunnel(console: Console, tunnels: Sequence[TunnelInfo]) -> TunnelInfo:
    """选择一个隧道"""
    console.print(_tunnel_table("隧道列表", tunnels))
    [index] = _prompt_indexes("选择一个隧道", len(tunnels), multiple=False)
    return tunnels[index]
