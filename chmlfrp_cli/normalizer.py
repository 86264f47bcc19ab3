"""
安装目录整理

解压得到的目录名带版本号（如 ChmlFrp-0.51.2_240715_linux_amd64），
这里把它重命名为固定的 chmlfrp/，替换掉之前的安装。

替换过程:
1. 旧的 chmlfrp/ 先改名为 .chmlfrp.old
2. 新目录改名为 chmlfrp/（失败时把 .chmlfrp.old 改回去）
3. 删除 .chmlfrp.old

上次运行中断留下的 .chmlfrp.old 会在开始前处理: chmlfrp/ 不存在则恢复，存在则删除。
"""

import logging
import shutil
from pathlib import Path

from .exceptions import InstallError

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "ChmlFrp-"
DEFAULT_STABLE_NAME = "chmlfrp"


def backup_path(search_dir: Path, stable_name: str) -> Path:
    return search_dir / f".{stable_name}.old"


def find_candidates(search_dir: Path, prefix: str, stable_name: str) -> list[Path]:
    """search_dir 下名称以 prefix 开头的直接子目录"""
    return [
        entry
        for entry in search_dir.iterdir()
        if entry.is_dir() and entry.name.startswith(prefix) and entry.name != stable_name
    ]


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def _recover_backup(stable: Path, backup: Path) -> None:
    if not backup.exists():
        return
    if stable.exists():
        logger.warning(f"删除上次残留的备份目录: {backup}")
        _remove(backup)
    else:
        logger.warning(f"上次替换未完成，恢复备份目录: {backup} -> {stable}")
        backup.rename(stable)


def normalize(
    search_dir: Path,
    prefix: str = DEFAULT_PREFIX,
    stable_name: str = DEFAULT_STABLE_NAME,
) -> Path | None:
    """
    把带版本号的目录重命名为固定目录

    有多个匹配目录时选择最近创建（st_ctime）的一个，同一时间按名称取最大者，
    其余目录保留不动。

    Args:
        search_dir: 查找目录（安装根目录）
        prefix: 版本目录名前缀
        stable_name: 固定目录名

    Returns:
        固定目录路径；没有匹配目录时返回 None

    Raises:
        InstallError: 重命名或删除失败
    """
    search_dir = Path(search_dir)
    stable = search_dir / stable_name
    backup = backup_path(search_dir, stable_name)

    try:
        _recover_backup(stable, backup)
        candidates = find_candidates(search_dir, prefix, stable_name)
    except OSError as e:
        raise InstallError(f"无法读取安装目录 {search_dir}: {e}") from e

    if not candidates:
        logger.warning(f"{search_dir} 中没有找到 {prefix}* 目录")
        return None

    chosen = max(candidates, key=lambda p: (p.stat().st_ctime, p.name))
    if len(candidates) > 1:
        others = ", ".join(sorted(p.name for p in candidates if p != chosen))
        logger.warning(f"找到多个 {prefix}* 目录，使用 {chosen.name}，忽略: {others}")

    try:
        if stable.exists() or stable.is_symlink():
            logger.info(f"移走旧的安装目录: {stable}")
            stable.rename(backup)

        logger.info(f"重命名 {chosen.name} -> {stable_name}")
        try:
            chosen.rename(stable)
        except OSError:
            if backup.exists() and not stable.exists():
                backup.rename(stable)
            raise

        if backup.exists() or backup.is_symlink():
            _remove(backup)
    except OSError as e:
        raise InstallError(f"整理安装目录失败: {e}") from e

    return stable
