"""
frpc 进程启动
"""

import logging
import os
import subprocess
from pathlib import Path

from .exceptions import ProcessLaunchError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "frpc.ini"


def binary_name() -> str:
    return "frpc.exe" if os.name == "nt" else "frpc"


def launch(install_dir: Path, config_path: Path | None = None) -> int:
    """
    启动 frpc 并等待退出

    标准输入输出直接继承，退出码原样返回，非零退出码不视为错误。

    Args:
        install_dir: 固定安装目录（frpc 所在目录）
        config_path: 配置文件路径，默认 install_dir/frpc.ini

    Returns:
        frpc 的退出码

    Raises:
        ProcessLaunchError: 可执行文件或配置文件不存在，或进程无法启动
    """
    install_dir = Path(install_dir)
    binary = install_dir / binary_name()
    config_path = Path(config_path) if config_path else install_dir / CONFIG_FILE_NAME

    if not binary.is_file():
        raise ProcessLaunchError(f"找不到 frpc: {binary}，请先执行 init")
    if not config_path.is_file():
        raise ProcessLaunchError(f"找不到配置文件: {config_path}，请先执行 cfg")

    command = [str(binary), "-c", str(config_path)]
    logger.info(f"启动: {' '.join(command)}")
    try:
        completed = subprocess.run(command, check=False)
    except OSError as e:
        raise ProcessLaunchError(f"frpc 启动失败: {e}") from e

    logger.info(f"frpc 已退出，退出码 {completed.returncode}")
    return completed.returncode
