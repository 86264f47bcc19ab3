"""
测试配置和 Fixtures
"""

import io
import tarfile
import zipfile
from pathlib import Path
from typing import Callable

import httpx
import pytest
from rich.console import Console

from chmlfrp_cli.config import Settings


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """以临时目录为根目录的配置"""
    return Settings(root_dir=tmp_path, fetch_retries=0, retry_delay=0)


@pytest.fixture
def quiet_console() -> Console:
    """不输出任何内容的控制台"""
    return Console(quiet=True)


@pytest.fixture
def make_tar_gz() -> Callable[[dict[str, bytes]], bytes]:
    """生成 tar.gz 内容，键以 / 结尾表示目录"""

    def build(entries: dict[str, bytes]) -> bytes:
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
            for name, data in entries.items():
                info = tarfile.TarInfo(name.rstrip("/"))
                if name.endswith("/"):
                    info.type = tarfile.DIRTYPE
                    info.mode = 0o755
                    archive.addfile(info)
                else:
                    info.size = len(data)
                    info.mode = 0o755
                    archive.addfile(info, io.BytesIO(data))
        return buffer.getvalue()

    return build


@pytest.fixture
def make_zip() -> Callable[[dict[str, bytes]], bytes]:
    """生成 zip 内容，键以 / 结尾表示目录"""

    def build(entries: dict[str, bytes]) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            for name, data in entries.items():
                archive.writestr(name, data)
        return buffer.getvalue()

    return build


@pytest.fixture
def request_log() -> list[httpx.Request]:
    """MockTransport 收到的请求"""
    return []


@pytest.fixture
def mock_client(request_log: list[httpx.Request]) -> Callable[..., httpx.AsyncClient]:
    """根据处理函数创建走 MockTransport 的 AsyncClient，并记录请求"""

    def build(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        def logged(request: httpx.Request) -> httpx.Response:
            request_log.append(request)
            return handler(request)

        return httpx.AsyncClient(transport=httpx.MockTransport(logged))

    return build
