"""SELECT 结果游标。"""
from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator


Binding = dict[str, dict[str, Any]]


class ResultCursor:
    """只读、只进的惰性结果游标。

    每行是 ``{变量名: {"type", "value", ["datatype"], ["xml:lang"]}}`` 形式的字典，
    与 SPARQL JSON 结果中的 ``bindings`` 元素一致；未绑定的变量不出现在行中。
    遍历一次后即耗尽，不支持回退。"""

    def __init__(
        self,
        vars: Iterable[str],
        rows: Iterable[Binding],
        *,
        stats: dict[str, Any] | None = None,
        on_close: Callable[[], None] | None = None,
    ) -> None:
        self.vars: list[str] = list(vars)
        self.stats: dict[str, Any] = stats or {}
        self._rows: Iterator[Binding] = iter(rows)
        self._on_close = on_close
        self._closed = False

    def __iter__(self) -> "ResultCursor":
        return self

    def __next__(self) -> Binding:
        if self._closed:
            raise StopIteration
        try:
            return next(self._rows)
        except StopIteration:
            self.close()
            raise

    def __enter__(self) -> "ResultCursor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def fetchone(self) -> Binding | None:
        """读取下一行，没有更多数据时返回 ``None``。"""

        return next(self, None)

    def fetchall(self) -> list[Binding]:
        """读取剩余全部行。"""

        return list(self)

    def close(self) -> None:
        """释放底层资源，重复调用无副作用。"""

        if self._closed:
            return
        self._closed = True
        if self._on_close is not None:
            self._on_close()
