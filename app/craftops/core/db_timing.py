from __future__ import annotations

from contextvars import ContextVar, Token

# Milliseconds spent in SQL for the current request; None outside a request.
_request_db_ms: ContextVar[float | None] = ContextVar("request_db_ms", default=None)


def start_db_timer() -> Token:
    return _request_db_ms.set(0.0)


def stop_db_timer(token: Token) -> None:
    _request_db_ms.reset(token)


def add_db_time(delta_ms: float) -> None:
    current = _request_db_ms.get()
    if current is not None:
        _request_db_ms.set(current + delta_ms)


def get_db_time_ms() -> float | None:
    return _request_db_ms.get()
