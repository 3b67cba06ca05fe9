"""Authorization-message decoding for every resource lifecycle operation.

``decorate_all`` is applied once, when resources are registered with the
engine. It swaps each non-empty lifecycle slot of every resource for a
wrapper that runs the original function and, if it raises, passes the
exception through ``decode_error`` before letting it propagate. Return
values are never touched.

Example usage:
    from stratus.authz import decorate_all

    resources = decorate_all({
        "bucket": Resource(create=create_bucket, read=read_bucket),
        "role": Resource(create=create_role, delete=delete_role),
    })
    engine.register(resources)
"""

from __future__ import annotations

import functools
from collections.abc import Callable, MutableMapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

from stratus.authz.decoder import AuthorizationDecoder, decode_error
from stratus.core.config import DecodingConfig
from stratus.core.logging import OperationContext, get_logger, with_context

_logger = get_logger("decoration")

R = TypeVar("R")

DecoderGetter = Callable[[Any], AuthorizationDecoder | None]
"""Obtains the decode capability from a lifecycle call's ``meta`` argument."""

_DECORATED_MARKER = "__stratus_decodes_authz__"


class LifecycleOperation(str, Enum):
    """Lifecycle slots that get wrapped."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    EXISTS = "exists"
    IMPORT_STATE = "import_state"


@dataclass(frozen=True)
class _Slot:
    """How to read and replace one lifecycle slot on a resource."""

    get: Callable[[Any], Callable[..., Any] | None]
    put: Callable[[Any, Callable[..., Any]], None]


def _attribute_slot(name: str) -> _Slot:
    return _Slot(
        get=lambda resource: getattr(resource, name, None),
        put=lambda resource, fn: setattr(resource, name, fn),
    )


def _get_import_state(resource: Any) -> Callable[..., Any] | None:
    importer = getattr(resource, "importer", None)
    if importer is None:
        return None
    return getattr(importer, "state", None)


def _put_import_state(resource: Any, fn: Callable[..., Any]) -> None:
    resource.importer.state = fn


_SLOTS: dict[LifecycleOperation, _Slot] = {
    LifecycleOperation.CREATE: _attribute_slot("create"),
    LifecycleOperation.READ: _attribute_slot("read"),
    LifecycleOperation.UPDATE: _attribute_slot("update"),
    LifecycleOperation.DELETE: _attribute_slot("delete"),
    LifecycleOperation.EXISTS: _attribute_slot("exists"),
    LifecycleOperation.IMPORT_STATE: _Slot(get=_get_import_state, put=_put_import_state),
}


def decoder_from_meta(meta: Any) -> AuthorizationDecoder | None:
    """Default decoder getter: ``meta.authorization_decoder`` or None."""
    return getattr(meta, "authorization_decoder", None)


def is_decorated(fn: Callable[..., Any] | None) -> bool:
    """Return True if ``fn`` is already a decoding wrapper."""
    return bool(getattr(fn, _DECORATED_MARKER, False))


def _resolve_decoder(decoder_getter: DecoderGetter, meta: Any) -> AuthorizationDecoder | None:
    try:
        return decoder_getter(meta)
    except Exception as exc:
        _logger.warning(
            "decoration.decoder_unavailable",
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return None


def _wrap_operation(
    resource_type: str,
    operation: LifecycleOperation,
    fn: Callable[..., R],
    decoder_getter: DecoderGetter,
) -> Callable[..., R]:
    @functools.wraps(fn)
    def wrapper(data: Any, meta: Any, *args: Any, **kwargs: Any) -> R:
        ctx = OperationContext(
            resource_type=resource_type,
            operation=operation.value,
            component="decoration",
        )
        with with_context(ctx):
            try:
                return fn(data, meta, *args, **kwargs)
            except Exception as exc:
                decoded = decode_error(_resolve_decoder(decoder_getter, meta), exc)
                if decoded is exc or decoded is None:
                    raise
                raise decoded from exc

    setattr(wrapper, _DECORATED_MARKER, True)
    return wrapper


def decorate_resource(
    resource: Any,
    *,
    resource_type: str = "",
    decoder_getter: DecoderGetter = decoder_from_meta,
) -> int:
    """Wrap every non-empty lifecycle slot of one resource in place.

    Slots that already hold a decoding wrapper are left alone, so applying
    this twice does not decode twice.

    Args:
        resource: Object with create/read/update/delete/exists/importer slots.
        resource_type: Name used in log context.
        decoder_getter: Obtains the decoder from each call's ``meta``.

    Returns:
        Number of slots wrapped.
    """
    wrapped = 0
    for operation, slot in _SLOTS.items():
        fn = slot.get(resource)
        if fn is None or is_decorated(fn):
            continue
        slot.put(resource, _wrap_operation(resource_type, operation, fn, decoder_getter))
        wrapped += 1
    return wrapped


def decorate_all(
    resources: MutableMapping[str, Any],
    *,
    decoder_getter: DecoderGetter = decoder_from_meta,
    config: DecodingConfig | None = None,
) -> MutableMapping[str, Any]:
    """Add authorization-message decoding to every resource in the mapping.

    The mapping is modified in place and returned; no resource is added or
    removed. Call once, before handing the resources to the engine.

    Args:
        resources: Resource type name to resource definition.
        decoder_getter: Obtains the decoder from each call's ``meta``.
        config: Decoding configuration. When disabled, nothing is wrapped.

    Returns:
        The same ``resources`` mapping.
    """
    if config is not None and not config.enabled:
        _logger.debug("decoration.disabled", resources=len(resources))
        return resources

    operations = 0
    for name, resource in resources.items():
        operations += decorate_resource(
            resource, resource_type=name, decoder_getter=decoder_getter
        )

    _logger.debug("decoration.applied", resources=len(resources), operations=operations)
    return resources


__all__ = [
    "DecoderGetter",
    "LifecycleOperation",
    "decorate_all",
    "decorate_resource",
    "decoder_from_meta",
    "is_decorated",
]
