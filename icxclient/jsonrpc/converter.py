"""
Converter registry: resolves a target type to a bidirectional RpcItem converter.

Factories are consulted in registration order and the first non-None result
wins. Types that no factory claims but which declare an ``RPC_FIELDS`` table
get a structural converter that maps each field to an object key and decodes
the field value through the registry again.
"""

from __future__ import annotations

import threading
import types
import typing
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, Optional, TypeVar

from icxclient.data.primitives import Address, Base64, Bytes
from icxclient.jsonrpc.items import RpcArray, RpcItem, RpcObject, RpcValue
from icxclient.utils.exceptions import MalformedResponseError, NoConverterError

T = TypeVar("T")


class RpcConverter(Generic[T]):
    """Bidirectional mapping between a typed value and its RpcItem form."""

    def encode(self, value: T) -> RpcItem:
        raise NotImplementedError

    def decode(self, item: RpcItem | None) -> T:
        raise NotImplementedError


class FunctionConverter(RpcConverter[T]):
    """Converter built from a pair of plain functions."""

    def __init__(
        self,
        name: str,
        decode: Callable[[RpcItem], T],
        encode: Callable[[T], RpcItem],
    ):
        self.name = name
        self._decode = decode
        self._encode = encode

    def encode(self, value: T) -> RpcItem:
        return self._encode(value)

    def decode(self, item: RpcItem | None) -> T:
        if item is None:
            raise MalformedResponseError(f"Missing value for {self.name}")
        return self._decode(item)

    def __repr__(self) -> str:
        return f"FunctionConverter({self.name})"


ConverterFactory = Callable[[Any, "ConverterRegistry"], Optional[RpcConverter]]


@dataclass(frozen=True)
class RpcField:
    """One entry of a type's static field table: attribute <-> object key."""
    attr: str
    key: str
    type: Any
    required: bool = True
    aliases: tuple[str, ...] = ()

    def lookup(self, obj: RpcObject) -> RpcItem | None:
        item = obj.get_item(self.key)
        if item is None:
            for alias in self.aliases:
                item = obj.get_item(alias)
                if item is not None:
                    break
        return item


class StructuralConverter(RpcConverter[T]):
    """Decodes an RpcObject into ``cls`` using the class's ``RPC_FIELDS`` table."""

    def __init__(self, cls: type, fields: Iterable[RpcField], registry: "ConverterRegistry"):
        self.cls = cls
        self.fields = tuple(fields)
        self._registry = registry

    def decode(self, item: RpcItem | None) -> T:
        if item is None:
            raise MalformedResponseError(f"Missing object for {self.cls.__name__}")
        obj = item.as_object()
        kwargs: dict[str, Any] = {}
        for field in self.fields:
            raw = field.lookup(obj)
            if raw is None:
                if field.required:
                    raise MalformedResponseError(
                        f"{self.cls.__name__}: missing required key '{field.key}'",
                        key=field.key,
                    )
                kwargs[field.attr] = None
                continue
            kwargs[field.attr] = self._registry.resolve(field.type).decode(raw)
        return self.cls(**kwargs)

    def encode(self, value: T) -> RpcItem:
        builder = RpcObject.Builder()
        for field in self.fields:
            attr_value = getattr(value, field.attr)
            if attr_value is None:
                continue
            builder.put(field.key, self._registry.resolve(field.type).encode(attr_value))
        return builder.build()

    def __repr__(self) -> str:
        return f"StructuralConverter({self.cls.__name__})"


class ListConverter(RpcConverter[list]):
    """Converter for ``list[X]``: an RpcArray whose entries decode as X."""

    def __init__(self, item_type: Any, registry: "ConverterRegistry"):
        self.item_type = item_type
        self._registry = registry

    def decode(self, item: RpcItem | None) -> list:
        if item is None:
            raise MalformedResponseError(f"Missing array of {self.item_type!r}")
        converter = self._registry.resolve(self.item_type)
        return [converter.decode(entry) for entry in item.as_array()]

    def encode(self, value: list) -> RpcItem:
        converter = self._registry.resolve(self.item_type)
        return RpcArray([converter.encode(entry) for entry in value])


class OptionalConverter(RpcConverter[Any]):
    """Converter for ``Optional[X]``: passes JSON null through as None."""

    def __init__(self, item_type: Any, registry: "ConverterRegistry"):
        self.item_type = item_type
        self._registry = registry

    def decode(self, item: RpcItem | None) -> Any:
        if item is None:
            return None
        return self._registry.resolve(self.item_type).decode(item)

    def encode(self, value: Any) -> RpcItem | None:
        if value is None:
            return None
        return self._registry.resolve(self.item_type).encode(value)


def new_factory(target_type: Any, converter: RpcConverter) -> ConverterFactory:
    """Factory that yields ``converter`` for exactly ``target_type``."""

    def factory(requested: Any, registry: "ConverterRegistry") -> RpcConverter | None:
        return converter if requested == target_type else None

    return factory


def list_factory(requested: Any, registry: "ConverterRegistry") -> RpcConverter | None:
    if typing.get_origin(requested) is list:
        args = typing.get_args(requested)
        if len(args) == 1:
            return ListConverter(args[0], registry)
    return None


def optional_factory(requested: Any, registry: "ConverterRegistry") -> RpcConverter | None:
    if typing.get_origin(requested) in (typing.Union, types.UnionType):
        args = [arg for arg in typing.get_args(requested) if arg is not type(None)]
        if len(args) == 1 and len(typing.get_args(requested)) == 2:
            return OptionalConverter(args[0], registry)
    return None


def structural_factory(cls: type) -> ConverterFactory:
    """Factory binding ``cls`` to a StructuralConverter over its ``RPC_FIELDS``."""

    def factory(requested: Any, registry: "ConverterRegistry") -> RpcConverter | None:
        if requested is cls:
            return StructuralConverter(cls, cls.RPC_FIELDS, registry)
        return None

    return factory


def _decode_str(item: RpcItem) -> str:
    return item.as_string()


INTEGER: RpcConverter[int] = FunctionConverter("int", lambda item: item.as_integer(), RpcValue)
BOOLEAN: RpcConverter[bool] = FunctionConverter("bool", lambda item: item.as_boolean(), RpcValue)
STRING: RpcConverter[str] = FunctionConverter("str", _decode_str, RpcValue)
BYTES: RpcConverter[Bytes] = FunctionConverter("Bytes", lambda item: item.as_bytes(), RpcValue)
BYTE_STRING: RpcConverter[bytes] = FunctionConverter(
    "bytes", lambda item: item.as_bytes().data, RpcValue
)
ADDRESS: RpcConverter[Address] = FunctionConverter("Address", lambda item: item.as_address(), RpcValue)
BASE64: RpcConverter[Base64] = FunctionConverter("Base64", lambda item: item.as_base64(), RpcValue)
RPC_ITEM: RpcConverter[RpcItem] = FunctionConverter("RpcItem", lambda item: item, lambda item: item)


class ConverterRegistry:
    """Ordered converter factories plus a read-through resolution cache."""

    def __init__(self, factories: Iterable[ConverterFactory] = ()):
        self._lock = threading.Lock()
        self._factories: list[ConverterFactory] = list(factories)
        self._cache: dict[Any, RpcConverter] = {}

    def register(self, factory: ConverterFactory) -> None:
        """Append a factory; earlier registrations take priority."""
        with self._lock:
            self._factories.append(factory)
            # A new factory may claim types that previously fell through.
            self._cache.clear()

    def resolve(self, target_type: Any) -> RpcConverter:
        with self._lock:
            cached = self._cache.get(target_type)
            factories = list(self._factories)
        if cached is not None:
            return cached

        for factory in factories:
            converter = factory(target_type, self)
            if converter is not None:
                return self._store(target_type, converter)

        fields = getattr(target_type, "RPC_FIELDS", None) if isinstance(target_type, type) else None
        if fields:
            return self._store(target_type, StructuralConverter(target_type, fields, self))

        raise NoConverterError(target_type)

    def _store(self, target_type: Any, converter: RpcConverter) -> RpcConverter:
        with self._lock:
            self._cache[target_type] = converter
        return converter


def scalar_factories() -> list[ConverterFactory]:
    """Factories for the primitive types, in their default priority order."""
    return [
        new_factory(int, INTEGER),
        new_factory(bool, BOOLEAN),
        new_factory(str, STRING),
        new_factory(Bytes, BYTES),
        new_factory(bytes, BYTE_STRING),
        new_factory(Address, ADDRESS),
        new_factory(RpcItem, RPC_ITEM),
        new_factory(Base64, BASE64),
    ]


def container_factories() -> list[ConverterFactory]:
    """Generic ``list[X]`` and ``Optional[X]`` support, tried after specific types."""
    return [list_factory, optional_factory]
