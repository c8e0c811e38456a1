"""示例脚本共享工具：加载示例配置并打开仓库。"""
from __future__ import annotations

import os
from pathlib import Path

from sf_virtuoso_acl import ConfigManager, VirtuosoRepository


CONFIG_PATH = Path(__file__).resolve().parent / "config" / "virtuoso.properties"

DEMO_GRAPH = "http://example.org/graph/demo"


def open_repository(driver: str | None = None) -> VirtuosoRepository:
    """读取 ``SF_VIRTUOSO_CONFIG``（缺省为 examples/config/virtuoso.properties）并连接。"""

    path = os.environ.get("SF_VIRTUOSO_CONFIG") or str(CONFIG_PATH)
    settings = ConfigManager.load(path).settings
    return VirtuosoRepository.from_settings(settings, driver=driver)  # type: ignore[arg-type]
