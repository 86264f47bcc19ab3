"""
安装目录整理测试
"""

import time
from pathlib import Path

import pytest

from chmlfrp_cli.exceptions import InstallError
from chmlfrp_cli.normalizer import backup_path, normalize


def make_dir(path: Path, files: dict[str, str]) -> Path:
    path.mkdir(parents=True)
    for name, content in files.items():
        (path / name).write_text(content)
    return path


def snapshot(path: Path) -> dict[str, str]:
    return {
        str(p.relative_to(path)): p.read_text()
        for p in sorted(path.rglob("*"))
        if p.is_file()
    }


class TestNormalize:
    """测试版本目录重命名"""

    def test_rename_versioned_directory(self, tmp_path: Path):
        """ChmlFrp-1.2.3/ 重命名为 chmlfrp/，内容不变"""
        make_dir(tmp_path / "ChmlFrp-1.2.3", {"frpc": "binary", "frpc.ini": "[common]"})
        (tmp_path / "ChmlFrp-1.2.3" / "sub").mkdir()
        (tmp_path / "ChmlFrp-1.2.3" / "sub" / "x.txt").write_text("x")

        result = normalize(tmp_path)

        stable = tmp_path / "chmlfrp"
        assert result == stable
        assert not (tmp_path / "ChmlFrp-1.2.3").exists()
        assert [p.name for p in tmp_path.iterdir()] == ["chmlfrp"]
        assert snapshot(stable) == {
            "frpc": "binary",
            "frpc.ini": "[common]",
            str(Path("sub") / "x.txt"): "x",
        }

    def test_replaces_existing_stable_directory(self, tmp_path: Path):
        """已有的 chmlfrp/ 被整体替换，旧内容不保留"""
        make_dir(tmp_path / "chmlfrp", {"frpc": "old binary", "old.log": "old"})
        make_dir(tmp_path / "ChmlFrp-1.2.3", {"frpc": "new binary"})

        normalize(tmp_path)

        assert snapshot(tmp_path / "chmlfrp") == {"frpc": "new binary"}
        assert not (tmp_path / "ChmlFrp-1.2.3").exists()
        assert not backup_path(tmp_path, "chmlfrp").exists()

    def test_no_match_is_noop(self, tmp_path: Path):
        """没有匹配目录时不做任何事"""
        make_dir(tmp_path / "download", {"ChmlFrp-1.2.3.tar.gz": "archive"})
        (tmp_path / "ChmlFrp-notes.txt").write_text("a file, not a directory")

        assert normalize(tmp_path) is None
        assert not (tmp_path / "chmlfrp").exists()
        assert (tmp_path / "ChmlFrp-notes.txt").exists()

    def test_other_directories_untouched(self, tmp_path: Path):
        """不以前缀开头的目录不受影响"""
        make_dir(tmp_path / "download", {"a": "a"})
        make_dir(tmp_path / "chmlfrp-backup", {"b": "b"})
        make_dir(tmp_path / "ChmlFrp-2.0", {"frpc": "new"})

        normalize(tmp_path)

        assert sorted(p.name for p in tmp_path.iterdir()) == [
            "chmlfrp",
            "chmlfrp-backup",
            "download",
        ]

    def test_custom_prefix_and_stable_name(self, tmp_path: Path):
        """前缀和固定目录名可以配置"""
        make_dir(tmp_path / "frp_0.58.0_linux_amd64", {"frpc": "bin"})

        result = normalize(tmp_path, prefix="frp_", stable_name="frp")

        assert result == tmp_path / "frp"
        assert (tmp_path / "frp" / "frpc").read_text() == "bin"

    def test_multiple_matches_pick_most_recent(self, tmp_path: Path):
        """多个匹配目录时使用最近创建的，其余保留"""
        make_dir(tmp_path / "ChmlFrp-0.1", {"frpc": "older"})
        time.sleep(0.05)
        make_dir(tmp_path / "ChmlFrp-0.2", {"frpc": "newer"})

        normalize(tmp_path)

        assert (tmp_path / "chmlfrp" / "frpc").read_text() == "newer"
        assert (tmp_path / "ChmlFrp-0.1" / "frpc").read_text() == "older"


class TestInterruptedReplace:
    """测试替换中断后的恢复"""

    def test_leftover_backup_is_restored(self, tmp_path: Path):
        """chmlfrp/ 不存在而备份存在时恢复备份"""
        make_dir(backup_path(tmp_path, "chmlfrp"), {"frpc": "previous"})

        assert normalize(tmp_path) is None
        assert (tmp_path / "chmlfrp" / "frpc").read_text() == "previous"
        assert not backup_path(tmp_path, "chmlfrp").exists()

    def test_leftover_backup_is_removed(self, tmp_path: Path):
        """chmlfrp/ 存在时删除残留备份"""
        make_dir(backup_path(tmp_path, "chmlfrp"), {"frpc": "stale"})
        make_dir(tmp_path / "chmlfrp", {"frpc": "current"})
        make_dir(tmp_path / "ChmlFrp-3.0", {"frpc": "new"})

        normalize(tmp_path)

        assert (tmp_path / "chmlfrp" / "frpc").read_text() == "new"
        assert not backup_path(tmp_path, "chmlfrp").exists()

    def test_failed_rename_restores_previous_install(self, tmp_path: Path, monkeypatch):
        """新目录重命名失败时恢复旧安装"""
        make_dir(tmp_path / "chmlfrp", {"frpc": "current"})
        make_dir(tmp_path / "ChmlFrp-3.0", {"frpc": "new"})

        original_rename = Path.rename

        def failing_rename(self, target):
            if self.name.startswith("ChmlFrp-"):
                raise OSError("rename failed")
            return original_rename(self, target)

        monkeypatch.setattr(Path, "rename", failing_rename)

        with pytest.raises(InstallError):
            normalize(tmp_path)

        assert (tmp_path / "chmlfrp" / "frpc").read_text() == "current"
        assert (tmp_path / "ChmlFrp-3.0" / "frpc").read_text() == "new"
        assert not backup_path(tmp_path, "chmlfrp").exists()
