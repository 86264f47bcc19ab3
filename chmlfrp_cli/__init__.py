"""
chmlfrp-cli - ChmlFrp 客户端安装/配置工具

功能：
- 按系统和架构下载 ChmlFrp 发布包（带缓存和校验）
- 解压 zip / tar.gz 并整理为固定的 chmlfrp/ 安装目录
- 通过 ChmlFrp API 选择节点和隧道，生成 frpc.ini
- 启动 frpc
"""

__version__ = "0.1.0"

from .api import ChmlFrpApi
from .config import Settings
from .credentials import CredentialStore
from .exceptions import (
    ChmlFrpError,
    ConfigFetchError,
    CredentialError,
    ExtractError,
    FetchError,
    InstallError,
    ProcessLaunchError,
    UnsupportedPlatformError,
)
from .extractor import extract
from .fetcher import ArchiveFetcher
from .installer import Installer
from .launcher import launch
from .models import ApiEnvelope, Credentials, NodeInfo, TunnelInfo
from .normalizer import normalize
from .resolver import DownloadTarget, PlatformKey, detect_platform, resolve_target

__all__ = [
    # 版本
    "__version__",
    # 安装流程
    "Installer",
    "PlatformKey",
    "DownloadTarget",
    "detect_platform",
    "resolve_target",
    "ArchiveFetcher",
    "extract",
    "normalize",
    # 远程 API
    "ChmlFrpApi",
    "ApiEnvelope",
    "TunnelInfo",
    "NodeInfo",
    # 配置与凭据
    "Settings",
    "CredentialStore",
    "Credentials",
    # 启动
    "launch",
    # 异常
    "ChmlFrpError",
    "UnsupportedPlatformError",
    "FetchError",
    "ExtractError",
    "InstallError",
    "ConfigFetchError",
    "CredentialError",
    "ProcessLaunchError",
]
