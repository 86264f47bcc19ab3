#!/usr/bin/env python
"""
以代码方式安装 chmlfrp

下载当前平台的发布包并整理到指定目录，不经过命令行交互。

用法:
    python examples/install.py [安装根目录]
"""

import asyncio
import logging
import sys
from pathlib import Path

from chmlfrp_cli import ChmlFrpError, Installer, Settings, detect_platform

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def main(root_dir: Path) -> int:
    settings = Settings(root_dir=root_dir)
    logger.info(f"平台: {detect_platform()}")

    try:
        stable = await Installer(settings).init()
    except ChmlFrpError as e:
        logger.error(f"安装失败: {e}")
        return 1

    if stable is None:
        logger.warning("压缩包中没有找到版本目录")
        return 1

    logger.info(f"已安装到 {stable}")
    return 0


if __name__ == "__main__":
    root = Path(sys.argv[1]) if len(sys.argv) > 1 else Path.cwd()
    sys.exit(asyncio.run(main(root)))
