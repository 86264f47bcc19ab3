"""
ChmlFrp 数据模型

远程 API 的响应结构、本地凭据以及下载缓存记录
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ApiEnvelope(BaseModel):
    """
    API 响应外层结构

    所有接口都返回 {msg, code, data, state}
    """

    msg: str = Field(default="", description="提示信息")
    code: int = Field(default=0, description="业务状态码")
    data: Any = Field(default=None, description="业务数据")
    state: str = Field(default="", description="success / fail")

    @property
    def ok(self) -> bool:
        """是否成功"""
        return self.state == "success" or self.code == 200


class TunnelInfo(BaseModel):
    """隧道信息（/tunnel 接口的 data 元素）"""

    model_config = ConfigDict(extra="allow", populate_by_name=True, coerce_numbers_to_str=True)

    id: int = Field(..., description="隧道 ID")
    name: str = Field(..., description="隧道名称")
    node: str = Field(..., description="所在节点名称")
    localip: str = Field(default="", description="本地 IP")
    tunnel_type: str = Field(default="", alias="type", description="隧道类型 tcp/udp/http...")
    nport: int = Field(default=0, description="本地端口")
    dorp: str = Field(default="", description="远程端口或绑定域名")
    state: str | bool = Field(default="", description="隧道状态")
    userid: int | None = Field(default=None, description="用户 ID")
    ip: str = Field(default="", description="节点地址")
    nodestate: str = Field(default="", description="节点状态")
    uptime: str | None = Field(default=None, description="上线时间")
    client_version: str | None = Field(default=None, description="客户端版本")
    today_traffic_in: int = Field(default=0, description="今日入流量")
    today_traffic_out: int = Field(default=0, description="今日出流量")
    cur_conns: int = Field(default=0, description="当前连接数")

    @property
    def remote_address(self) -> str:
        """远程访问地址"""
        return f"{self.ip}:{self.dorp}" if self.ip else self.dorp


class NodeInfo(BaseModel):
    """节点信息（/node 接口的 data 元素）"""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: int = Field(..., description="节点 ID")
    name: str = Field(..., description="节点名称")
    area: str = Field(default="", description="地区")
    nodegroup: str = Field(default="", description="节点分组（user/vip）")
    china: str | bool | None = Field(default=None, description="是否国内节点")
    web: str | bool | None = Field(default=None, description="是否允许建站")
    udp: str | bool | None = Field(default=None, description="是否支持 UDP")
    notes: str | None = Field(default=None, description="备注")


class Credentials(BaseModel):
    """本地保存的用户凭据"""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    token: str = Field(..., description="用户 token")
    user_id: str = Field(default="", description="用户 ID")


class CachedArchiveRecord(BaseModel):
    """下载完成后与压缩包一同保存的校验记录"""

    url: str = Field(..., description="下载地址")
    size: int = Field(..., description="文件大小（字节）")
    sha256: str = Field(..., description="文件 SHA-256")
