"""配置加载入口。

``ConfigManager.load()`` 按以下顺序确定配置文件：

1. 显式传入的 ``override_path``；
2. 环境变量 ``SF_VIRTUOSO_CONFIG``。

支持 YAML（``.yaml``/``.yml``）与 Java 风格 ``.properties`` 两种格式。``.properties``
兼容历史键名 ``Repository_IP``、``Repository_Port``、``Repository_Username``、
``Repository_Password``，其他键可使用点号路径，例如 ``virtuoso.driver=http``。"""
from __future__ import annotations

import os
from pathlib import Path
from threading import Lock
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from ..exceptions import ConfigurationError
from .settings import Settings


ENV_CONFIG_PATH = "SF_VIRTUOSO_CONFIG"

_LEGACY_PROPERTY_KEYS = {
    "Repository_IP": "virtuoso.host",
    "Repository_Port": "virtuoso.port",
    "Repository_Username": "virtuoso.username",
    "Repository_Password": "virtuoso.password",
}


class ConfigManager:
    """进程级配置持有者。"""

    _current: "ConfigManager | None" = None
    _lock = Lock()

    def __init__(self, settings: Settings, *, source: str | None = None) -> None:
        self.settings = settings
        self.source = source

    @classmethod
    def load(cls, override_path: str | os.PathLike[str] | None = None) -> "ConfigManager":
        """读取配置文件并设为当前配置。

        参数：
            override_path：配置文件路径，例如 ``"config/virtuoso.yaml"``；缺省时读取环境变量。

        返回：新的 :class:`ConfigManager` 实例。

        异常：找不到文件或内容校验失败时抛出 :class:`ConfigurationError`。"""

        path_value = override_path or os.environ.get(ENV_CONFIG_PATH)
        if not path_value:
            raise ConfigurationError(
                "未指定配置文件",
                details={"hint": f"传入 override_path 或设置环境变量 {ENV_CONFIG_PATH}"},
            )
        path = Path(path_value)
        if not path.is_file():
            raise ConfigurationError("配置文件不存在", details={"path": str(path)})

        text = path.read_text(encoding="utf-8")
        if path.suffix == ".properties":
            raw = properties_to_mapping(parse_properties(text))
        else:
            try:
                raw = yaml.safe_load(text) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError("YAML 解析失败", details={"path": str(path), "error": str(exc)}) from exc
        manager = cls(cls._validate(raw, source=str(path)), source=str(path))
        with cls._lock:
            cls._current = manager
        return manager

    @classmethod
    def use(cls, settings: Settings | Mapping[str, Any]) -> "ConfigManager":
        """直接使用给定配置（对象或字典）作为当前配置。"""

        if not isinstance(settings, Settings):
            settings = cls._validate(settings, source=None)
        manager = cls(settings)
        with cls._lock:
            cls._current = manager
        return manager

    @classmethod
    def current(cls) -> "ConfigManager":
        """返回当前配置；尚未加载时尝试依据环境变量加载。"""

        with cls._lock:
            manager = cls._current
        if manager is None:
            return cls.load()
        return manager

    @classmethod
    def reset(cls) -> None:
        """清除当前配置，主要用于测试。"""

        with cls._lock:
            cls._current = None

    @staticmethod
    def _validate(raw: Mapping[str, Any], *, source: str | None) -> Settings:
        try:
            return Settings.model_validate(dict(raw))
        except ValidationError as exc:
            raise ConfigurationError(
                "配置校验失败",
                details={"source": source, "errors": exc.errors(include_url=False)},
            ) from exc


def parse_properties(text: str) -> dict[str, str]:
    """解析 Java ``.properties`` 文本（``key=value`` 或 ``key: value``）。"""

    result: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line[0] in "#!":
            continue
        separators = [idx for idx in (line.find("="), line.find(":")) if idx > 0]
        if not separators:
            result[line] = ""
            continue
        idx = min(separators)
        result[line[:idx].strip()] = line[idx + 1 :].strip()
    return result


def properties_to_mapping(properties: Mapping[str, str]) -> dict[str, Any]:
    """将扁平属性转换为嵌套字典，兼容历史键名。"""

    mapping: dict[str, Any] = {}
    for key, value in properties.items():
        dotted = _LEGACY_PROPERTY_KEYS.get(key, key)
        node = mapping
        parts = dotted.split(".")
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = value
    return mapping


__all__ = ["ConfigManager", "Settings", "parse_properties", "properties_to_mapping", "ENV_CONFIG_PATH"]
