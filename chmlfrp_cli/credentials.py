"""
本地凭据存储

token 和用户 ID 保存在安装根目录下的 config.js（JSON）。
兼容旧的 token.js，其内容可以是同样的 JSON，也可以只是 token 字符串。
"""

import json
import logging
from pathlib import Path

import click
from pydantic import ValidationError

from .exceptions import CredentialError
from .models import Credentials

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.js"
LEGACY_TOKEN_FILE_NAME = "token.js"


class CredentialStore:
    """凭据存储"""

    def __init__(self, root_dir: Path):
        self.root_dir = Path(root_dir)

    @property
    def config_file(self) -> Path:
        return self.root_dir / CONFIG_FILE_NAME

    @property
    def legacy_token_file(self) -> Path:
        return self.root_dir / LEGACY_TOKEN_FILE_NAME

    def load(self) -> Credentials | None:
        """
        读取凭据

        Returns:
            凭据；两个文件都不存在时返回 None

        Raises:
            CredentialError: 文件存在但无法解析
        """
        if self.config_file.exists():
            return self._parse(self.config_file, allow_raw_token=False)
        if self.legacy_token_file.exists():
            return self._parse(self.legacy_token_file, allow_raw_token=True)
        return None

    def save(self, credentials: Credentials) -> Path:
        """以 JSON 格式写入 config.js"""
        try:
            self.root_dir.mkdir(parents=True, exist_ok=True)
            self.config_file.write_text(
                json.dumps(credentials.model_dump(), indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as e:
            raise CredentialError(f"无法写入凭据文件 {self.config_file}: {e}") from e
        logger.debug(f"凭据已保存: {self.config_file}")
        return self.config_file

    def prompt(self) -> Credentials:
        """交互式输入 token 和用户 ID 并保存"""
        token = click.prompt("输入你的token").strip()
        user_id = click.prompt("输入你的用户id", default="", show_default=False).strip()
        credentials = Credentials(token=token, user_id=user_id)
        self.save(credentials)
        return credentials

    def get(self, reset: bool = False) -> Credentials:
        """读取凭据，不存在或 reset=True 时重新输入"""
        if not reset:
            credentials = self.load()
            if credentials is not None:
                return credentials
        return self.prompt()

    def _parse(self, path: Path, allow_raw_token: bool) -> Credentials:
        try:
            text = path.read_text(encoding="utf-8").strip()
        except OSError as e:
            raise CredentialError(f"无法读取凭据文件 {path}: {e}") from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            if allow_raw_token and text:
                return Credentials(token=text)
            raise CredentialError(f"凭据文件格式错误 {path}: {e}") from e

        if allow_raw_token and isinstance(data, str):
            return Credentials(token=data)

        try:
            return Credentials.model_validate(data)
        except ValidationError as e:
            raise CredentialError(f"凭据文件内容错误 {path}: {e}") from e
