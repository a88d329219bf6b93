"""Built-in converters for the node's response types and the default registry."""

from __future__ import annotations

from icxclient.data.models import (
    Block,
    BlockNotification,
    ConfirmedTransaction,
    EventNotification,
    ScoreApi,
    TransactionResult,
)
from icxclient.data.primitives import Base64
from icxclient.jsonrpc.converter import (
    ConverterFactory,
    ConverterRegistry,
    container_factories,
    list_factory,
    scalar_factories,
    structural_factory,
)

RESPONSE_TYPES = (
    Block,
    ConfirmedTransaction,
    TransactionResult,
    BlockNotification,
    EventNotification,
)

SCORE_API_LIST = list[ScoreApi]
BASE64_LIST = list[Base64]


def _exact_list_factory(list_type: object) -> ConverterFactory:
    def factory(requested, registry):
        return list_factory(requested, registry) if requested == list_type else None

    return factory


def builtin_factories() -> list[ConverterFactory]:
    """Scalars first, then response types, then the generic containers."""
    factories = scalar_factories()
    factories.extend(structural_factory(cls) for cls in RESPONSE_TYPES)
    factories.append(_exact_list_factory(SCORE_API_LIST))
    factories.append(_exact_list_factory(BASE64_LIST))
    factories.extend(container_factories())
    return factories


def create_default_registry(*extra: ConverterFactory) -> ConverterRegistry:
    """Registry with caller factories ahead of the built-ins."""
    return ConverterRegistry([*extra, *builtin_factories()])
