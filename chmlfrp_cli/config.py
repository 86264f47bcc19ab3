"""
ChmlFrp CLI 配置
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """命令行配置（可通过 CHMLFRP_ 前缀的环境变量覆盖）"""

    # 目录布局
    root_dir: Path = Field(
        default_factory=Path.cwd,
        description="安装根目录（download/ 与 chmlfrp/ 所在目录）",
    )
    download_dir_name: str = Field(default="download", description="下载缓存目录名")
    install_dir_name: str = Field(default="chmlfrp", description="固定安装目录名")
    release_prefix: str = Field(
        default="ChmlFrp-", description="解压后带版本号目录的名称前缀"
    )

    # 下载
    download_url: str | None = Field(
        default=None, description="覆盖自动选择的下载地址（镜像）"
    )
    request_timeout: float = Field(default=60.0, description="请求超时（秒）")
    fetch_retries: int = Field(default=2, description="网络错误时的最大重试次数")
    retry_delay: float = Field(default=1.0, description="重试间隔（秒）")
    chunk_size: int = Field(default=65536, description="下载分块大小（字节）")

    # 远程 API
    tunnel_url: str = Field(
        default="https://cf-v2.uapis.cn/tunnel", description="隧道列表接口"
    )
    tunnel_config_url: str = Field(
        default="https://cf-v2.uapis.cn/tunnel_config", description="隧道配置文件接口"
    )
    delete_tunnel_url: str = Field(
        default="https://cf-v1.uapis.cn/api/deletetl.php", description="删除隧道接口"
    )
    node_url: str = Field(
        default="https://cf-v2.uapis.cn/node", description="全部节点接口"
    )

    model_config = {
        "env_prefix": "CHMLFRP_",
        "env_file": ".env",
        "extra": "ignore",
    }

    @property
    def download_dir(self) -> Path:
        """下载缓存目录"""
        return self.root_dir / self.download_dir_name

    @property
    def install_dir(self) -> Path:
        """固定安装目录"""
        return self.root_dir / self.install_dir_name

    @property
    def config_file(self) -> Path:
        """frpc 配置文件路径"""
        return self.install_dir / "frpc.ini"
