"""配置模型定义。

所有配置均为 pydantic 模型，可由 YAML、``.properties`` 文件或直接传入的字典构造。
连接 Virtuoso 的四个必填项为 ``host``、``port``、``username``、``password``。"""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.engine import URL


DriverType = Literal["sql", "http", "rdflib"]

DEFAULT_PREFIXES = {
    "diachron": "http://www.diachron-fp7.eu/resource/",
    "efo": "http://www.ebi.ac.uk/efo/",
    "co": "http://www.diachron-fp7.eu/changes/",
}

DEFAULT_NAMESPACES = {
    "rdf": "http://www.w3.org/1999/02/22-rdf-syntax-ns#",
    "rdfs": "http://www.w3.org/2000/01/rdf-schema#",
}


class AppConfig(BaseModel):
    """应用级配置。"""

    env: str = "dev"
    log_level: str = "INFO"


class TimeoutConfig(BaseModel):
    """请求超时配置（秒）。"""

    default: int = Field(default=30, ge=1)
    max: int = Field(default=120, ge=1)


class RetryConfig(BaseModel):
    """HTTP 通道的重试策略。"""

    max_attempts: int = Field(default=3, ge=1)
    backoff_seconds: float = 0.5
    backoff_multiplier: float = 2.0
    jitter_seconds: float | None = 0.1


class CircuitBreakerConfig(BaseModel):
    """熔断器配置，字段别名与 HTTP 客户端参数保持一致。"""

    model_config = ConfigDict(populate_by_name=True)

    failure_threshold: int = Field(default=5, alias="failureThreshold")
    recovery_timeout: float = Field(default=30.0, alias="recoveryTimeout")
    record_timeout_only: bool = Field(default=False, alias="recordTimeoutOnly")


class SQLConfig(BaseModel):
    """SQL 通道配置。

    ``url`` 为空时以 ``drivername`` 与主机、端口、凭据拼装 SQLAlchemy URL，
    ``charset`` 作为 URL 查询参数传给驱动。"""

    url: str | None = None
    drivername: str = "virtuoso"
    charset: str | None = "UTF-8"
    log_enable: bool = True
    isolation: str | None = "uncommitted"


class HTTPConfig(BaseModel):
    """SPARQL HTTP 端点配置。"""

    endpoint: str | None = None
    scheme: Literal["http", "https"] = "http"
    port: int = 8890
    path: str = "/sparql-auth"
    auth_scheme: Literal["digest", "basic", "none"] = "digest"
    trace_header: str = "X-Trace-Id"
    check_on_connect: bool = True


class VirtuosoConfig(BaseModel):
    """Virtuoso 连接及语句构建配置。"""

    host: str
    port: int = Field(ge=1, le=65535)
    username: str
    password: str
    driver: DriverType = "sql"
    sql: SQLConfig = Field(default_factory=SQLConfig)
    http: HTTPConfig = Field(default_factory=HTTPConfig)
    timeout: TimeoutConfig = Field(default_factory=TimeoutConfig)
    retries: RetryConfig = Field(default_factory=RetryConfig)
    circuit_breaker: CircuitBreakerConfig = Field(default_factory=CircuitBreakerConfig)
    prefixes: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_PREFIXES))
    namespaces: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_NAMESPACES))
    insert_batch_size: int = Field(default=1000, ge=1)

    @field_validator("host", "username")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("不能为空")
        return value.strip()

    def sql_url(self) -> str | URL:
        """返回 SQL 通道使用的 SQLAlchemy URL。

        显式配置的 ``sql.url`` 原样返回；否则返回 :class:`~sqlalchemy.engine.URL` 对象，
        凭据中的 ``@``、``/``、``:`` 等字符无需转义。"""

        if self.sql.url:
            return self.sql.url
        query = {"charset": self.sql.charset} if self.sql.charset else {}
        return URL.create(
            self.sql.drivername,
            username=self.username,
            password=self.password,
            host=self.host,
            port=self.port,
            query=query,
        )

    def http_endpoint(self) -> str:
        """返回 SPARQL HTTP 端点根地址，例如 ``http://localhost:8890``。"""

        if self.http.endpoint:
            return self.http.endpoint.rstrip("/")
        return f"{self.http.scheme}://{self.host}:{self.http.port}"


class Settings(BaseModel):
    """配置根对象。"""

    app: AppConfig = Field(default_factory=AppConfig)
    virtuoso: VirtuosoConfig
