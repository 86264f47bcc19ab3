"""
安装流程

init: 解析平台 → 准备缓存目录 → 下载 → 解压 → 整理目录
任一步骤失败即中止，除了下载缓存外不做任何断点续做。
"""

import logging
import shutil
from pathlib import Path

from rich.console import Console

from .config import Settings
from .exceptions import InstallError
from .extractor import extract
from .fetcher import ArchiveFetcher
from .normalizer import normalize
from .resolver import DownloadTarget, PlatformKey, detect_platform, resolve_target

logger = logging.getLogger(__name__)


class Installer:
    """ChmlFrp 安装器"""

    def __init__(
        self,
        settings: Settings,
        fetcher: ArchiveFetcher | None = None,
        platform_key: PlatformKey | None = None,
        console: Console | None = None,
    ):
        """
        Args:
            settings: 配置
            fetcher: 下载器（可选，默认按配置创建）
            platform_key: 平台（可选，默认检测当前运行环境）
            console: 输出控制台
        """
        self.settings = settings
        self.console = console or Console()
        self.fetcher = fetcher or ArchiveFetcher(
            timeout=settings.request_timeout,
            retries=settings.fetch_retries,
            retry_delay=settings.retry_delay,
            chunk_size=settings.chunk_size,
            console=self.console,
        )
        self.platform_key = platform_key or detect_platform()

    def resolve_target(self) -> DownloadTarget:
        """配置了 download_url 时直接使用，否则按平台查表"""
        if self.settings.download_url:
            try:
                return DownloadTarget.from_url(self.settings.download_url)
            except ValueError as e:
                raise InstallError(f"下载地址无效: {e}") from e
        return resolve_target(self.platform_key.os_name, self.platform_key.arch_name)

    async def init(self) -> Path | None:
        """
        执行完整安装流程

        Returns:
            固定安装目录；解压后没有找到版本目录时返回 None
        """
        target = self.resolve_target()
        logger.info(f"平台 {self.platform_key}: {target.url}")

        cache_dir = self.settings.download_dir
        try:
            cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise InstallError(f"无法创建下载目录 {cache_dir}: {e}") from e

        archive_path = await self.fetcher.fetch(target, cache_dir)

        self.console.print(f"[yellow]解压 {target.archive_format} 文件中...[/yellow]")
        extract(archive_path, self.settings.root_dir)

        stable = normalize(
            self.settings.root_dir,
            prefix=self.settings.release_prefix,
            stable_name=self.settings.install_dir_name,
        )
        if stable is not None:
            logger.info(f"安装完成: {stable}")
        return stable

    def clear_cache(self) -> bool:
        """
        删除下载缓存目录

        Returns:
            是否删除了目录（目录本来就不存在时返回 False）
        """
        download_dir = self.settings.download_dir
        if not download_dir.exists():
            logger.info(f"缓存目录不存在: {download_dir}")
            return False
        try:
            shutil.rmtree(download_dir)
        except OSError as e:
            raise InstallError(f"无法删除缓存目录 {download_dir}: {e}") from e
        logger.info(f"已删除缓存目录: {download_dir}")
        return True

    def write_config(self, ini_text: str) -> Path:
        """把配置文本原样写入 frpc.ini"""
        config_file = self.settings.config_file
        try:
            config_file.parent.mkdir(parents=True, exist_ok=True)
            config_file.write_text(ini_text, encoding="utf-8")
        except OSError as e:
            raise InstallError(f"无法写入配置文件 {config_file}: {e}") from e
        logger.info(f"配置文件已写入: {config_file}")
        return config_file
