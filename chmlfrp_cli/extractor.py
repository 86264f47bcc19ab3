"""
压缩包解压

按文件名后缀选择解压方式: .zip 走 zip，其余（ChmlFrp 发布包只有 .tar.gz）走 gzip + tar。
无法安全落在目标目录内的条目（绝对路径、.. 路径穿越）一律跳过，不写入磁盘。
"""

import logging
import shutil
import tarfile
import zipfile
from pathlib import Path, PurePosixPath

from .exceptions import ExtractError

logger = logging.getLogger(__name__)


def safe_relative_path(name: str) -> PurePosixPath | None:
    """
    把压缩包内的条目名转换为安全的相对路径

    Returns:
        相对路径；条目名为空、是绝对路径、带盘符或包含 .. 时返回 None
    """
    name = name.replace("\\", "/")
    path = PurePosixPath(name)
    if path.is_absolute():
        return None
    parts = [part for part in path.parts if part not in ("", ".")]
    if not parts or ".." in parts or ":" in parts[0]:
        return None
    return PurePosixPath(*parts)


def _is_within(base: Path, target: Path) -> bool:
    try:
        target.resolve().relative_to(base.resolve())
    except ValueError:
        return False
    return True


def _is_safe_link(base: Path, member: tarfile.TarInfo, relative: PurePosixPath) -> bool:
    """链接目标必须是目标目录内的相对路径，普通条目总是返回 True"""
    if not (member.issym() or member.islnk()):
        return True
    link = safe_relative_path(member.linkname)
    if link is None:
        return False
    # 符号链接相对于自身所在目录，硬链接相对于压缩包根目录
    parent = base / relative.parent if member.issym() else base
    return _is_within(base, parent / link)


def extract(archive_path: Path, destination_dir: Path) -> None:
    """
    解压到目标目录

    Raises:
        ExtractError: 压缩包损坏、包含不支持的条目或写文件失败
    """
    archive_path = Path(archive_path)
    destination_dir = Path(destination_dir)

    if archive_path.name.lower().endswith(".zip"):
        logger.info(f"解压 zip 文件: {archive_path}")
        extract_zip(archive_path, destination_dir)
    else:
        logger.info(f"解压 tar.gz 文件: {archive_path}")
        extract_tar_gz(archive_path, destination_dir)
    logger.info(f"解压完成: {destination_dir}")


def extract_zip(archive_path: Path, destination_dir: Path) -> None:
    try:
        destination_dir.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(archive_path) as archive:
            for info in archive.infolist():
                relative = safe_relative_path(info.filename)
                outpath = destination_dir / relative if relative else None
                if outpath is None or not _is_within(destination_dir, outpath):
                    logger.warning(f"跳过不安全的条目: {info.filename}")
                    continue

                if info.filename.endswith(("/", "\\")):
                    outpath.mkdir(parents=True, exist_ok=True)
                    continue

                outpath.parent.mkdir(parents=True, exist_ok=True)
                try:
                    source = archive.open(info)
                except (NotImplementedError, RuntimeError) as e:
                    # 不支持的压缩方法或加密条目
                    raise ExtractError(f"不支持的条目: {info.filename}: {e}") from e
                with source, open(outpath, "wb") as target:
                    shutil.copyfileobj(source, target)

                # zip 在 unix 上创建时会把权限放在 external_attr 的高 16 位
                mode = (info.external_attr >> 16) & 0o777
                if mode:
                    outpath.chmod(mode)
    except (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError) as e:
        raise ExtractError(f"zip 文件损坏: {archive_path}: {e}") from e
    except OSError as e:
        raise ExtractError(f"解压 {archive_path} 失败: {e}") from e


def extract_tar_gz(archive_path: Path, destination_dir: Path) -> None:
    try:
        destination_dir.mkdir(parents=True, exist_ok=True)
        with tarfile.open(archive_path, "r:gz") as archive:
            members = []
            for member in archive.getmembers():
                relative = safe_relative_path(member.name)
                if relative is None or not _is_within(destination_dir, destination_dir / relative):
                    logger.warning(f"跳过不安全的条目: {member.name}")
                    continue
                if member.isdev():
                    raise ExtractError(f"不支持的条目类型: {member.name}")
                if not _is_safe_link(destination_dir, member, relative):
                    logger.warning(f"跳过指向目标目录外的链接: {member.name} -> {member.linkname}")
                    continue
                members.append(member)

            if hasattr(tarfile, "data_filter"):
                archive.extractall(destination_dir, members=members, filter="data")
            else:
                archive.extractall(destination_dir, members=members)
    except ExtractError:
        raise
    except (tarfile.TarError, EOFError) as e:
        raise ExtractError(f"tar.gz 文件损坏: {archive_path}: {e}") from e
    except OSError as e:
        raise ExtractError(f"解压 {archive_path} 失败: {e}") from e
