"""
ChmlFrp 远程 API 客户端

四个接口都是带查询参数的 GET 请求，返回 {msg, code, data, state} 结构:
- 隧道列表      GET /tunnel?token=
- 隧道配置文件  GET /tunnel_config?token=&node=&tunnel_names=a,b
- 删除隧道      GET /api/deletetl.php?token=&nodeid=&userid=
- 全部节点      GET /node
"""

import logging
from typing import Any, Iterable

import httpx
from pydantic import ValidationError

from .config import Settings
from .exceptions import ConfigFetchError
from .models import ApiEnvelope, NodeInfo, TunnelInfo

logger = logging.getLogger(__name__)


class ChmlFrpApi:
    """
    ChmlFrp API 客户端

    使用示例:
        async with ChmlFrpApi(settings) as api:
            tunnels = await api.list_tunnels(token)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.settings = settings or Settings()
        self._client = client or httpx.AsyncClient(
            timeout=self.settings.request_timeout, follow_redirects=True
        )
        self._owns_client = client is None

    async def __aenter__(self) -> "ChmlFrpApi":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def list_tunnels(self, token: str) -> list[TunnelInfo]:
        """获取用户的全部隧道"""
        envelope = await self._get_envelope(self.settings.tunnel_url, {"token": token})
        return self._parse_list(envelope, TunnelInfo)

    async def fetch_config(
        self, token: str, node: str, tunnel_names: Iterable[str]
    ) -> str:
        """
        获取渲染好的 frpc 配置

        Returns:
            INI 文本，原样写入 frpc.ini
        """
        params = {
            "token": token,
            "node": node,
            "tunnel_names": ",".join(tunnel_names),
        }
        envelope = await self._get_envelope(self.settings.tunnel_config_url, params)
        if not isinstance(envelope.data, str):
            raise ConfigFetchError("配置文件接口返回的 data 不是文本")
        return envelope.data

    async def delete_tunnel(
        self, token: str, tunnel_id: int | str, user_id: str
    ) -> ApiEnvelope:
        """
        删除隧道

        旧版接口不一定返回标准结构，状态码为 2xx 即视为成功
        """
        params = {"token": token, "nodeid": str(tunnel_id), "userid": user_id}
        response = await self._request(self.settings.delete_tunnel_url, params)
        try:
            envelope = ApiEnvelope.model_validate(response.json())
        except (ValueError, ValidationError):
            return ApiEnvelope(
                msg=response.text, code=response.status_code, state="success"
            )
        self._ensure_ok(envelope)
        return envelope

    async def list_nodes(self) -> list[NodeInfo]:
        """获取全部节点"""
        envelope = await self._get_envelope(self.settings.node_url, {})
        return self._parse_list(envelope, NodeInfo)

    async def _request(self, url: str, params: dict[str, str]) -> httpx.Response:
        logger.debug(f"GET {url}")
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as e:
            raise ConfigFetchError(f"请求 {url} 失败: {e}") from e

        if not response.is_success:
            raise ConfigFetchError(
                f"请求 {url} 失败: HTTP {response.status_code} {response.text[:200]}"
            )
        return response

    async def _get_envelope(self, url: str, params: dict[str, str]) -> ApiEnvelope:
        response = await self._request(url, params)
        try:
            envelope = ApiEnvelope.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ConfigFetchError(f"无法解析 {url} 的响应: {e}") from e
        self._ensure_ok(envelope)
        return envelope

    @staticmethod
    def _ensure_ok(envelope: ApiEnvelope) -> None:
        if not envelope.ok:
            raise ConfigFetchError(
                f"接口返回失败: {envelope.msg or envelope.state} (code={envelope.code})"
            )

    @staticmethod
    def _parse_list(envelope: ApiEnvelope, model: type) -> list[Any]:
        if envelope.data is None:
            return []
        if not isinstance(envelope.data, list):
            raise ConfigFetchError("接口返回的 data 不是列表")
        try:
            return [model.model_validate(item) for item in envelope.data]
        except ValidationError as e:
            raise ConfigFetchError(f"接口返回的数据格式错误: {e}") from e
