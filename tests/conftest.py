"""测试公共夹具。

所有单元测试都以记录型传输桩替代真实 Virtuoso：桩记录收到的每条语句，并按预置
队列返回 SELECT 结果或抛出异常。
"""
from __future__ import annotations

from collections import deque
from typing import Any, Callable

import pytest

from sf_virtuoso_acl.common.config import ConfigManager
from sf_virtuoso_acl.common.config.settings import Settings
from sf_virtuoso_acl.common.exceptions import UnsupportedOperationError
from sf_virtuoso_acl.connection.cursor import ResultCursor
from sf_virtuoso_acl.repository import VirtuosoRepository


class RecordingClient:
    """记录语句的传输桩。

    - supports_sql: 是否模拟 SQL 通道
    - queue_select(): 预置 SELECT 结果，每项为行列表或异常实例
    - statements: 按顺序记录的 ``(kind, text)``
    """

    def __init__(self, *, supports_sql: bool = True, transport: str = "stub") -> None:
        self.transport = transport
        self.supports_sql = supports_sql
        self.statements: list[tuple[str, str]] = []
        self.select_results: deque[Any] = deque()
        self.update_error: Exception | None = None
        self.close_error: Exception | None = None
        self.construct_result = ""
        self.connected = False
        self.close_calls = 0

    def queue_select(self, rows: list[dict[str, Any]] | Exception, vars: list[str] | None = None) -> None:
        self.select_results.append((rows, vars))

    @property
    def updates(self) -> list[str]:
        return [text for kind, text in self.statements if kind == "update"]

    def connect(self) -> None:
        self.connected = True

    def select(self, query: str, *, timeout: int | None = None, trace_id: str | None = None) -> ResultCursor:
        self.statements.append(("select", query))
        rows, vars = self.select_results.popleft() if self.select_results else ([], None)
        if isinstance(rows, Exception):
            raise rows
        names = vars if vars is not None else sorted({key for row in rows for key in row})
        return ResultCursor(names, rows)

    def construct(self, query: str, *, timeout: int | None = None, trace_id: str | None = None) -> str:
        self.statements.append(("construct", query))
        return self.construct_result

    def update(self, update: str, *, timeout: int | None = None, trace_id: str | None = None) -> dict[str, Any]:
        self.statements.append(("update", update))
        if self.update_error is not None:
            raise self.update_error
        return {"status": "ok", "durationMs": 0.0}

    def execute_sql(self, statement: str, *, trace_id: str | None = None) -> dict[str, Any]:
        if not self.supports_sql:
            raise UnsupportedOperationError("stub does not support SQL")
        self.statements.append(("sql", statement))
        return {"status": "ok", "rowcount": 0, "durationMs": 0.0}

    def health(self) -> dict[str, Any]:
        return {"ok": self.connected, "transport": self.transport}

    def close(self) -> None:
        self.close_calls += 1
        self.connected = False
        if self.close_error is not None:
            raise self.close_error


@pytest.fixture(autouse=True)
def _reset_config(monkeypatch: pytest.MonkeyPatch):
    """隔离进程级配置与环境变量。"""

    monkeypatch.delenv("SF_VIRTUOSO_CONFIG", raising=False)
    ConfigManager.reset()
    yield
    ConfigManager.reset()


@pytest.fixture()
def settings() -> Settings:
    return Settings.model_validate(
        {
            "app": {"env": "test", "log_level": "DEBUG"},
            "virtuoso": {
                "host": "virtuoso.local",
                "port": 1111,
                "username": "dba",
                "password": "dba",
            },
        }
    )


@pytest.fixture()
def client() -> RecordingClient:
    return RecordingClient()


@pytest.fixture()
def repository(client: RecordingClient) -> VirtuosoRepository:
    repo = VirtuosoRepository(client)
    yield repo
    repo.terminate()


@pytest.fixture()
def make_repository() -> Callable[..., tuple[VirtuosoRepository, RecordingClient]]:
    """按需构造仓库与桩，例如 ``make_repository(supports_sql=False)``。"""

    created: list[VirtuosoRepository] = []

    def factory(*, supports_sql: bool = True, **repo_kwargs: Any) -> tuple[VirtuosoRepository, RecordingClient]:
        stub = RecordingClient(supports_sql=supports_sql)
        repo = VirtuosoRepository(stub, **repo_kwargs)
        created.append(repo)
        return repo, stub

    yield factory
    for repo in created:
        repo.terminate()
