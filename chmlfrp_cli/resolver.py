"""
平台解析

根据当前操作系统和 CPU 架构选择 ChmlFrp 的下载地址。
查找表是静态的，只做精确匹配，不做任何兜底猜测。
"""

import platform
from types import MappingProxyType
from typing import Mapping
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict

from .exceptions import UnsupportedPlatformError

RELEASE_BASE_URL = "https://www.chmlfrp.cn/dw/"
RELEASE_NAME = "ChmlFrp-0.51.2_240715"


class PlatformKey(BaseModel):
    """(操作系统, 架构) 查找键"""

    model_config = ConfigDict(frozen=True)

    os_name: str
    arch_name: str

    def __str__(self) -> str:
        return f"{self.os_name}/{self.arch_name}"


class DownloadTarget(BaseModel):
    """下载目标"""

    model_config = ConfigDict(frozen=True)

    url: str
    file_name: str

    @classmethod
    def from_url(cls, url: str) -> "DownloadTarget":
        """文件名取 URL 路径的最后一段"""
        file_name = urlparse(url).path.rstrip("/").rsplit("/", 1)[-1]
        if not file_name:
            raise ValueError(f"无法从 URL 解析文件名: {url}")
        return cls(url=url, file_name=file_name)

    @property
    def archive_format(self) -> str:
        """压缩格式: zip 或 tar.gz"""
        return "zip" if self.file_name.lower().endswith(".zip") else "tar.gz"


def _release_url(suffix: str) -> str:
    return f"{RELEASE_BASE_URL}{RELEASE_NAME}_{suffix}"


DOWNLOAD_TARGETS: Mapping[PlatformKey, DownloadTarget] = MappingProxyType(
    {
        PlatformKey(os_name=os_name, arch_name=arch_name): DownloadTarget.from_url(
            _release_url(suffix)
        )
        for (os_name, arch_name), suffix in {
            ("windows", "x86_64"): "windows_amd64.zip",
            ("windows", "aarch64"): "windows_arm64.zip",
            ("linux", "x86_64"): "linux_amd64.tar.gz",
            ("linux", "aarch64"): "linux_arm64.tar.gz",
            ("freebsd", "x86_64"): "freebsd_amd64.tar.gz",
            ("macos", "x86_64"): "darwin_amd64.tar.gz",
            ("macos", "aarch64"): "darwin_arm64.tar.gz",
        }.items()
    }
)

_OS_ALIASES = {
    "darwin": "macos",
}

_ARCH_ALIASES = {
    "amd64": "x86_64",
    "x64": "x86_64",
    "arm64": "aarch64",
}


def normalize_os(name: str) -> str:
    name = name.lower()
    return _OS_ALIASES.get(name, name)


def normalize_arch(name: str) -> str:
    name = name.lower()
    return _ARCH_ALIASES.get(name, name)


def detect_platform() -> PlatformKey:
    """
    获取当前运行环境的平台键

    platform.system() / platform.machine() 的取值会被转换为查找表使用的名称
    （Darwin → macos, AMD64/arm64 → x86_64/aarch64），未知取值原样（小写）保留。
    """
    return PlatformKey(
        os_name=normalize_os(platform.system()),
        arch_name=normalize_arch(platform.machine()),
    )


def supported_platforms() -> list[PlatformKey]:
    """查找表中的全部平台"""
    return list(DOWNLOAD_TARGETS)


def resolve_target(os_name: str, arch_name: str) -> DownloadTarget:
    """
    查找 (操作系统, 架构) 对应的下载目标

    Raises:
        UnsupportedPlatformError: 查找表中没有该组合
    """
    target = DOWNLOAD_TARGETS.get(PlatformKey(os_name=os_name, arch_name=arch_name))
    if target is None:
        raise UnsupportedPlatformError(os_name, arch_name)
    return target
