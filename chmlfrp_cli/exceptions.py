"""
ChmlFrp CLI 异常定义
"""


class ChmlFrpError(Exception):
    """所有 chmlfrp-cli 错误的基类"""

    pass


class UnsupportedPlatformError(ChmlFrpError):
    """当前系统/架构没有对应的下载地址"""

    def __init__(self, os_name: str, arch_name: str):
        self.os_name = os_name
        self.arch_name = arch_name
        super().__init__(f"不支持的平台: {os_name}/{arch_name}")


class FetchError(ChmlFrpError):
    """下载压缩包失败（网络或写文件）"""

    pass


class ExtractError(ChmlFrpError):
    """解压失败（压缩包损坏、不支持的条目或写文件失败）"""

    pass


class InstallError(ChmlFrpError):
    """安装目录整理失败"""

    pass


class ConfigFetchError(ChmlFrpError):
    """远程 API 返回失败或响应无法解析"""

    pass


class CredentialError(ChmlFrpError):
    """本地凭据文件无法读取或解析"""

    pass


class ProcessLaunchError(ChmlFrpError):
    """frpc 无法启动"""

    pass
