"""按配置创建传输客户端。"""
from __future__ import annotations

from sf_virtuoso_acl.common.config.settings import DriverType, VirtuosoConfig
from sf_virtuoso_acl.common.exceptions import ConfigurationError

from .client import RDFClient
from .http import VirtuosoHTTPClient
from .sql import VirtuosoSQLClient
from .store import RDFLibStoreClient


def create_client(config: VirtuosoConfig, driver: DriverType | None = None) -> RDFClient:
    """根据 ``driver``（缺省取配置中的 ``driver``）构造尚未连接的传输客户端。

    参数：
        config：Virtuoso 连接配置。
        driver：``"sql"``、``"http"`` 或 ``"rdflib"``。

    异常：未知驱动名称时抛出 :class:`ConfigurationError`。"""

    name = driver or config.driver
    if name == "sql":
        return VirtuosoSQLClient(
            config.sql_url(),
            isolation=config.sql.isolation,
            log_enable=config.sql.log_enable,
        )
    if name == "http":
        cb = config.circuit_breaker
        return VirtuosoHTTPClient(
            config.http_endpoint(),
            path=config.http.path,
            auth=(config.username, config.password),
            auth_scheme=config.http.auth_scheme,
            trace_header=config.http.trace_header,
            default_timeout=config.timeout.default,
            max_timeout=config.timeout.max,
            retry_policy=config.retries.model_dump(),
            circuit_breaker={
                "failureThreshold": cb.failure_threshold,
                "recoveryTimeout": cb.recovery_timeout,
                "recordTimeoutOnly": cb.record_timeout_only,
            },
            check_on_connect=config.http.check_on_connect,
        )
    if name == "rdflib":
        endpoint = config.http_endpoint() + "/" + config.http.path.lstrip("/")
        auth = None if config.http.auth_scheme == "none" else (config.username, config.password)
        return RDFLibStoreClient(endpoint, auth=auth, check_on_connect=config.http.check_on_connect)
    raise ConfigurationError("未知的 Virtuoso 驱动", details={"driver": name})
