"""
压缩包下载

流式下载 ChmlFrp 压缩包到缓存目录，已存在的缓存直接复用。

缓存规则:
- 缓存文件存在且有校验记录（<文件名>.json）时，大小和 SHA-256 一致才复用，否则重新下载
- 缓存文件存在但没有校验记录时，按存在即可信处理（手动放入或旧版本下载的文件）
- 下载先写入 <文件名>.part，完整结束后才重命名，中断的下载不会被当作缓存
"""

import asyncio
import hashlib
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import httpx
from pydantic import ValidationError
from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

from .exceptions import FetchError
from .models import CachedArchiveRecord
from .resolver import DownloadTarget

logger = logging.getLogger(__name__)


def record_path(archive_path: Path) -> Path:
    """校验记录文件路径"""
    return archive_path.with_name(f"{archive_path.name}.json")


def file_sha256(path: Path, chunk_size: int = 65536) -> str:
    sha256 = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            sha256.update(chunk)
    return sha256.hexdigest()


def content_length(response: httpx.Response) -> int:
    """Content-Length 缺失或无法解析时返回 0"""
    try:
        return max(int(response.headers.get("content-length", 0)), 0)
    except ValueError:
        return 0


class ArchiveFetcher:
    """
    压缩包下载器

    每个分块写入文件后才读取下一个分块，不会把整个响应读入内存
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
        retries: int = 2,
        retry_delay: float = 1.0,
        chunk_size: int = 65536,
        console: Console | None = None,
        show_progress: bool = True,
    ):
        """
        初始化下载器

        Args:
            client: 外部提供的 HTTP 客户端（可选，不提供则每次下载时创建）
            timeout: 请求超时（秒）
            retries: 网络错误时的最大重试次数（HTTP 状态错误不重试）
            retry_delay: 重试间隔基数（秒），第 n 次重试等待 n * retry_delay
            chunk_size: 读取分块大小
            console: 进度条输出的控制台
            show_progress: 是否显示进度条
        """
        self._client = client
        self.timeout = timeout
        self.retries = retries
        self.retry_delay = retry_delay
        self.chunk_size = chunk_size
        self.console = console
        self.show_progress = show_progress

    async def fetch(self, target: DownloadTarget, cache_dir: Path) -> Path:
        """
        获取压缩包

        Args:
            target: 下载目标
            cache_dir: 缓存目录

        Returns:
            缓存中的压缩包路径

        Raises:
            FetchError: 网络错误、HTTP 状态错误或写文件失败
        """
        cache_dir = Path(cache_dir)
        archive_path = cache_dir / target.file_name

        if archive_path.exists():
            if self._is_cache_valid(archive_path):
                logger.info(f"检测到已缓存的压缩包: {archive_path}")
                return archive_path
            logger.warning(f"缓存文件校验失败，重新下载: {archive_path}")
            self._discard(archive_path)

        try:
            cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FetchError(f"无法创建下载目录 {cache_dir}: {e}") from e

        attempt = 0
        while True:
            try:
                record = await self._download(target.url, archive_path)
                break
            except httpx.TransportError as e:
                if attempt >= self.retries:
                    raise FetchError(f"下载失败 {target.url}: {e}") from e
                attempt += 1
                delay = self.retry_delay * attempt
                logger.warning(
                    f"下载出错: {e}，{delay}秒后重试 (第 {attempt}/{self.retries} 次)"
                )
                await asyncio.sleep(delay)
            except httpx.HTTPError as e:
                raise FetchError(f"下载失败 {target.url}: {e}") from e

        try:
            record_path(archive_path).write_text(record.model_dump_json(indent=2))
        except OSError as e:
            raise FetchError(f"无法写入校验记录: {e}") from e

        logger.info(f"下载完成: {archive_path} ({record.size} 字节)")
        return archive_path

    def _is_cache_valid(self, archive_path: Path) -> bool:
        """检查缓存文件与校验记录是否一致"""
        sidecar = record_path(archive_path)
        if not sidecar.exists():
            logger.warning(f"缓存文件没有校验记录，按已存在处理: {archive_path}")
            return True

        try:
            record = CachedArchiveRecord.model_validate_json(sidecar.read_text())
        except (OSError, ValidationError) as e:
            logger.warning(f"校验记录无法读取: {e}")
            return False

        if archive_path.stat().st_size != record.size:
            return False
        return file_sha256(archive_path, self.chunk_size) == record.sha256

    def _discard(self, archive_path: Path) -> None:
        try:
            archive_path.unlink(missing_ok=True)
            record_path(archive_path).unlink(missing_ok=True)
        except OSError as e:
            raise FetchError(f"无法删除损坏的缓存 {archive_path}: {e}") from e

    async def _download(self, url: str, archive_path: Path) -> CachedArchiveRecord:
        """流式下载到 .part 文件，完成后重命名为目标文件"""
        part_path = archive_path.with_name(f"{archive_path.name}.part")
        sha256 = hashlib.sha256()
        downloaded = 0

        try:
            async with self._open_client() as client:
                async with client.stream("GET", url) as response:
                    response.raise_for_status()
                    total = content_length(response)
                    logger.debug(f"GET {url} -> {response.status_code}, 大小 {total}")

                    with self._progress() as progress:
                        task_id = progress.add_task(
                            f"下载 {archive_path.name}", total=total or None
                        )
                        with open(part_path, "wb") as f:
                            async for chunk in response.aiter_bytes(self.chunk_size):
                                f.write(chunk)
                                sha256.update(chunk)
                                downloaded += len(chunk)
                                progress.update(task_id, completed=downloaded)

            part_path.replace(archive_path)
        except OSError as e:
            part_path.unlink(missing_ok=True)
            raise FetchError(f"写入 {archive_path} 失败: {e}") from e
        except BaseException:
            part_path.unlink(missing_ok=True)
            raise

        return CachedArchiveRecord(url=url, size=downloaded, sha256=sha256.hexdigest())

    @asynccontextmanager
    async def _open_client(self) -> AsyncIterator[httpx.AsyncClient]:
        """使用外部客户端时不关闭它，否则创建临时客户端"""
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
            yield client

    def _progress(self) -> Progress:
        return Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=self.console,
            transient=True,
            disable=not self.show_progress,
        )

