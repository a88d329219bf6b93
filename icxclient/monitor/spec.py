"""Subscription specs: what a monitor asks the node to stream."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from icxclient.data.models import EventLog
from icxclient.data.primitives import Address
from icxclient.jsonrpc.items import RpcArray, RpcItem, RpcObject, RpcValue
from icxclient.utils.exceptions import InvalidArgumentError


def _filter_array(values: list[Optional[str]]) -> RpcArray:
    return RpcArray([RpcValue(value) if value is not None else None for value in values])


def _position_matches(expected: Optional[str], actual: Optional[RpcItem]) -> bool:
    if expected is None or expected == "":
        return True
    if actual is None:
        return False
    return actual.as_string() == expected


def _positions_match(filters: list[Optional[str]], args: list[Optional[RpcItem]]) -> bool:
    for position, expected in enumerate(filters):
        actual = args[position] if position < len(args) else None
        if not _position_matches(expected, actual):
            return False
    return True


@dataclass(frozen=True)
class BlockMonitorSpec:
    """Stream every block from ``height`` on."""
    height: int

    path = "block"

    def __post_init__(self) -> None:
        if self.height < 0:
            raise InvalidArgumentError("start height must not be negative", field="height")

    def to_item(self) -> RpcObject:
        return RpcObject.Builder().put("height", RpcValue(self.height)).build()


@dataclass(frozen=True)
class EventMonitorSpec:
    """Stream event logs matching a signature and optional positional filters.

    ``indexed`` and ``data`` are matched position by position against the
    event's indexed and non-indexed arguments. A None or empty entry matches
    anything, and positions past the end of a filter are unconstrained.
    """
    height: int
    event: str
    address: Optional[Address] = None
    indexed: list[Optional[str]] = field(default_factory=list)
    data: list[Optional[str]] = field(default_factory=list)

    path = "event"

    def __post_init__(self) -> None:
        if self.height < 0:
            raise InvalidArgumentError("start height must not be negative", field="height")
        if not self.event:
            raise InvalidArgumentError("event signature is required", field="event")
        object.__setattr__(self, "indexed", list(self.indexed or []))
        object.__setattr__(self, "data", list(self.data or []))

    def to_item(self) -> RpcObject:
        builder = RpcObject.Builder()
        builder.put("height", RpcValue(self.height))
        builder.put("event", RpcValue(self.event))
        if self.address is not None:
            builder.put("addr", RpcValue(self.address))
        if self.indexed:
            builder.put("indexed", _filter_array(self.indexed))
        if self.data:
            builder.put("data", _filter_array(self.data))
        return builder.build()

    def matches(self, log: EventLog) -> bool:
        """Apply this spec's filters to an event log on the client side."""
        if log.signature != self.event:
            return False
        if self.address is not None and log.score_address != self.address:
            return False
        # indexed[0] carries the signature itself.
        return _positions_match(self.indexed, list(log.indexed[1:])) and _positions_match(
            self.data, list(log.data)
        )


MonitorSpec = Union[BlockMonitorSpec, EventMonitorSpec]
