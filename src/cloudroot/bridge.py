"""Method-call bridge between the application shell and native code.

A channel routes ``MethodCall`` requests to a single handler, which answers
exactly once through a result callback with either a success value, a
``ChannelError`` or ``NOT_IMPLEMENTED``.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError

LOGGER = logging.getLogger(__name__)

UNEXPECTED_ERROR = "UNEXPECTED_ERROR"
INVALID_REQUEST = "INVALID_REQUEST"


class _NotImplementedReply:
    _instance: Optional["_NotImplementedReply"] = None

    def __new__(cls) -> "_NotImplementedReply":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_IMPLEMENTED"


NOT_IMPLEMENTED = _NotImplementedReply()


class MethodCall(BaseModel):
    """A single request sent over the channel."""

    model_config = ConfigDict(frozen=True)

    method: str
    arguments: Any = None

    def argument(self, key: str, default: Any = None) -> Any:
        if isinstance(self.arguments, Mapping):
            return self.arguments.get(key, default)
        return default


class ChannelError(BaseModel):
    """Structured failure returned across the bridge."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: Optional[str] = None
    details: Optional[Any] = None


Reply = Union[ChannelError, _NotImplementedReply, Any]
Result = Callable[[Reply], None]
MethodCallHandler = Callable[[MethodCall, Result], None]


class InvalidRequest(ValueError):
    """Raised when an encoded request cannot be decoded into a ``MethodCall``."""


class _OneShotResult:
    """Wraps a result callback so only the first reply is forwarded."""

    def __init__(self, result: Result, *, channel: str, method: str) -> None:
        self._result = result
        self._channel = channel
        self._method = method
        self._lock = threading.Lock()
        self._replied = False

    def __call__(self, reply: Reply) -> None:
        with self._lock:
            if self._replied:
                LOGGER.warning("Dropping duplicate reply for %s on %s", self._method, self._channel)
                return
            self._replied = True
        self._result(reply)


class MethodChannel:
    """Named channel dispatching calls to one registered handler."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._handler: MethodCallHandler | None = None

    def set_method_call_handler(self, handler: MethodCallHandler | None) -> None:
        self._handler = handler

    def invoke(self, call: MethodCall, result: Result) -> None:
        """Deliver ``call`` to the handler; ``result`` is called exactly once."""

        reply = _OneShotResult(result, channel=self.name, method=call.method)
        handler = self._handler
        if handler is None:
            reply(NOT_IMPLEMENTED)
            return
        try:
            handler(call, reply)
        except Exception as exc:  # noqa: BLE001
            LOGGER.exception("Handler for %s on %s raised", call.method, self.name)
            reply(ChannelError(code=UNEXPECTED_ERROR, message="Unexpected error handling method call", details=str(exc)))

    def invoke_and_wait(self, call: MethodCall) -> Reply:
        """Blocking form of ``invoke`` for callers without their own context."""

        done = threading.Event()
        box: list[Reply] = []

        def _result(reply: Reply) -> None:
            box.append(reply)
            done.set()

        self.invoke(call, _result)
        done.wait()
        return box[0]


def decode_call(payload: str | bytes | Mapping[str, Any]) -> MethodCall:
    """Parse a JSON request ``{"method": ..., "arguments": ...}``."""

    try:
        data = json.loads(payload) if isinstance(payload, (str, bytes)) else payload
        return MethodCall.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as exc:
        raise InvalidRequest(str(exc)) from exc


def encode_reply(reply: Reply) -> dict[str, Any]:
    """Return the JSON envelope for a channel reply."""

    if reply is NOT_IMPLEMENTED:
        return {"status": "not_implemented"}
    if isinstance(reply, ChannelError):
        return {"status": "error", **reply.model_dump()}
    return {"status": "success", "result": reply}


__all__ = [
    "ChannelError",
    "INVALID_REQUEST",
    "InvalidRequest",
    "MethodCall",
    "MethodCallHandler",
    "MethodChannel",
    "NOT_IMPLEMENTED",
    "Reply",
    "Result",
    "UNEXPECTED_ERROR",
    "decode_call",
    "encode_reply",
]
