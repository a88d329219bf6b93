"""
Monitor: a long-lived subscription that decodes pushed notifications.

State machine: OPEN -> ACTIVE -> CLOSED. The channel is owned by the
monitor and released on every path out of ``start``; ``close`` may be
called at any time, from any task, any number of times.
"""

from __future__ import annotations

from enum import Enum
from typing import Generic, TypeVar

from loguru import logger

from icxclient.jsonrpc.converter import RpcConverter
from icxclient.jsonrpc.items import RpcItem
from icxclient.jsonrpc.transport import ChannelHandle, Transport
from icxclient.monitor.spec import MonitorSpec
from icxclient.utils.exceptions import (
    IcxClientError,
    MalformedResponseError,
    MonitorDecodeError,
    MonitorError,
    TransportError,
)

T = TypeVar("T")


class MonitorState(Enum):
    OPEN = "open"
    ACTIVE = "active"
    CLOSED = "closed"


class MonitorHandler(Generic[T]):
    """Receives monitor lifecycle and notification callbacks. Override what you need."""

    def on_start(self) -> None:
        pass

    def on_event(self, event: T) -> None:
        pass

    def on_error(self, exc: IcxClientError) -> None:
        pass

    def on_close(self) -> None:
        pass


def _ack_code(ack: RpcItem | None) -> int:
    if ack is None:
        raise MonitorError("channel closed during handshake")
    try:
        code = ack.as_object().get_item("code")
        return code.as_integer() if code is not None else 0
    except MalformedResponseError as exc:
        raise MonitorError(f"malformed handshake acknowledgement: {exc.message}") from exc


class Monitor(Generic[T]):
    def __init__(self, transport: Transport, spec: MonitorSpec, converter: RpcConverter[T]):
        self.spec = spec
        self.state = MonitorState.OPEN
        self._transport = transport
        self._converter = converter
        self._channel: ChannelHandle | None = None
        self._handler: MonitorHandler[T] | None = None

    async def start(self, handler: MonitorHandler[T]) -> None:
        """Open, handshake and deliver notifications until the channel ends or close() is called."""
        if self.state is not MonitorState.OPEN:
            raise MonitorError(f"monitor cannot start from state {self.state.value}")
        self._handler = handler
        try:
            channel = await self._transport.open_channel(self.spec.path)
            if self.state is MonitorState.CLOSED:
                await channel.close()
                return
            self._channel = channel
            await channel.send(self.spec.to_item())
            code = _ack_code(await channel.next_message())
            if code != 0:
                raise MonitorError(f"subscription rejected with code {code}", monitor_code=code)
            if self.state is MonitorState.CLOSED:
                return
            self.state = MonitorState.ACTIVE
            logger.debug(f"monitor {self.spec.path} active from height {self.spec.height}")
            handler.on_start()
            await self._pump(channel, handler)
        except (TransportError, MonitorError) as exc:
            if self.state is not MonitorState.CLOSED:
                logger.warning(f"monitor {self.spec.path} failed: {exc}")
                handler.on_error(exc)
        finally:
            await self.close()

    async def _pump(self, channel: ChannelHandle, handler: MonitorHandler[T]) -> None:
        while self.state is MonitorState.ACTIVE:
            try:
                item = await channel.next_message()
                if item is None:
                    return
                event = self._converter.decode(item)
            except MalformedResponseError as exc:
                if self.state is not MonitorState.ACTIVE:
                    return
                logger.warning(f"monitor {self.spec.path}: skipping undecodable message: {exc.message}")
                handler.on_error(MonitorDecodeError(exc.message, cause=exc))
                continue
            if self.state is not MonitorState.ACTIVE:
                return
            handler.on_event(event)

    async def close(self) -> None:
        if self.state is MonitorState.CLOSED:
            return
        self.state = MonitorState.CLOSED
        channel, self._channel = self._channel, None
        try:
            if channel is not None:
                await channel.close()
        finally:
            if self._handler is not None:
                self._handler.on_close()

    @property
    def active(self) -> bool:
        return self.state is MonitorState.ACTIVE
