"""iCloud method handler wiring the resolver onto a channel."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from cloudroot.bridge import (
    INVALID_REQUEST,
    NOT_IMPLEMENTED,
    UNEXPECTED_ERROR,
    ChannelError,
    MethodCall,
    MethodChannel,
    Result,
)
from cloudroot.errors import ResolutionError
from cloudroot.resolver import Deliver, Outcome, StorageRootResolver

LOGGER = logging.getLogger(__name__)

GET_DOCUMENTS_PATH = "getICloudDocumentsPath"


class ICloudHandler:
    """Answers ``getICloudDocumentsPath`` calls on ``channel``.

    Resolution runs on the resolver's worker pool; replies go back through
    ``deliver`` so they land on whatever context the shell expects.
    """

    def __init__(
        self,
        channel: MethodChannel,
        resolver: StorageRootResolver,
        *,
        deliver: Deliver | None = None,
    ) -> None:
        self.channel = channel
        self.resolver = resolver
        self.deliver = deliver
        channel.set_method_call_handler(self.handle)

    def handle(self, call: MethodCall, result: Result) -> None:
        if call.method == GET_DOCUMENTS_PATH:
            self.get_documents_path(call, result)
        else:
            result(NOT_IMPLEMENTED)

    def get_documents_path(self, call: MethodCall, result: Result) -> None:
        identifier = call.argument("containerIdentifier")
        subpath = call.argument("subpath")
        for name, value in (("containerIdentifier", identifier), ("subpath", subpath)):
            if value is not None and not isinstance(value, str):
                result(ChannelError(code=INVALID_REQUEST, message=f"{name} must be a string", details=repr(value)))
                return

        self.resolver.dispatch(
            identifier,
            subpath,
            on_complete=lambda outcome: result(to_reply(outcome)),
            deliver=self.deliver,
        )


def to_reply(outcome: Outcome) -> object:
    """Convert a resolver outcome into a channel reply."""

    if isinstance(outcome, Path):
        return str(outcome)
    if isinstance(outcome, ResolutionError):
        return ChannelError(code=outcome.code, message=outcome.message, details=outcome.details)
    LOGGER.error("Unexpected resolver failure: %r", outcome)
    return ChannelError(code=UNEXPECTED_ERROR, message="Unexpected error resolving iCloud directory", details=str(outcome))


def build_channel(
    resolver: StorageRootResolver,
    *,
    name: str,
    deliver: Optional[Deliver] = None,
) -> MethodChannel:
    """Create a channel with an ``ICloudHandler`` attached."""

    channel = MethodChannel(name)
    ICloudHandler(channel, resolver, deliver=deliver)
    return channel


__all__ = ["GET_DOCUMENTS_PATH", "ICloudHandler", "build_channel", "to_reply"]
