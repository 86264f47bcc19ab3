"""
交互式选择测试
"""

import pytest
from rich.console import Console

from chmlfrp_cli import selection
from chmlfrp_cli.models import TunnelInfo
from chmlfrp_cli.selection import (
    choose_node,
    choose_tunnel,
    choose_tunnels,
    group_by_node,
    parse_choices,
)


def tunnel(id: int, name: str, node: str) -> TunnelInfo:
    return TunnelInfo(id=id, name=name, node=node, type="tcp", nport=8000 + id, dorp=str(20000 + id))


@pytest.fixture
def tunnels() -> list[TunnelInfo]:
    return [
        tunnel(1, "web", "US-2"),
        tunnel(2, "ssh", "HK-1"),
        tunnel(3, "db", "US-2"),
    ]


@pytest.fixture
def answers(monkeypatch):
    queue: list[str] = []
    monkeypatch.setattr(selection.click, "prompt", lambda text, **kwargs: queue.pop(0))
    return queue


class TestGroupByNode:
    """测试按节点归类"""

    def test_grouping(self, tunnels):
        grouped = group_by_node(tunnels)

        assert list(grouped) == ["HK-1", "US-2"]
        assert [t.name for t in grouped["US-2"]] == ["web", "db"]
        assert [t.name for t in grouped["HK-1"]] == ["ssh"]

    def test_empty(self):
        assert group_by_node([]) == {}


class TestParseChoices:
    """测试编号解析"""

    @pytest.mark.parametrize(
        "text,multiple,expected",
        [
            ("1", False, [0]),
            (" 3 ", False, [2]),
            ("1,3", True, [0, 2]),
            ("3，1", True, [2, 0]),
            ("1-3", True, [0, 1, 2]),
            ("2,1-2", True, [1, 0]),
            ("all", True, [0, 1, 2]),
        ],
    )
    def test_valid(self, text, multiple, expected):
        assert parse_choices(text, 3, multiple) == expected

    @pytest.mark.parametrize(
        "text,multiple",
        [
            ("", False),
            ("0", False),
            ("4", False),
            ("abc", False),
            ("1,2", False),
            ("1-2", False),
            ("all", False),
            ("3-1", True),
            ("1-9", True),
            (",", True),
        ],
    )
    def test_invalid(self, text, multiple):
        with pytest.raises(ValueError):
            parse_choices(text, 3, multiple)


class TestPrompts:
    """测试交互选择返回模型对象"""

    def test_choose_node(self, tunnels, answers):
        answers.append("2")
        assert choose_node(Console(quiet=True), group_by_node(tunnels)) == "US-2"

    def test_choose_tunnels_retries_invalid_input(self, tunnels, answers):
        """输入无效时重新提示"""
        answers.extend(["9", "1,3"])

        selected = choose_tunnels(Console(quiet=True), tunnels)

        assert [t.id for t in selected] == [1, 3]
        assert answers == []

    def test_choose_tunnel(self, tunnels, answers):
        answers.append("2")
        assert choose_tunnel(Console(quiet=True), tunnels).name == "ssh"
