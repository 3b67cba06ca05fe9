"""Data models for cloud API errors.

This module provides:
- CloudApiError: The structured error raised by control-plane API clients
- ErrorDetails: Normalized (code, message, status_code) view of any error
- error_details(): Extracts ErrorDetails from whatever exception was raised
- replace_message(): Copies an error with a new message, keeping its class
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, TypeVar


class CloudApiError(Exception):
    """Structured error returned by the control-plane API.

    Carries a machine-readable ``code``, a human-readable ``message`` and,
    when the transport reported one, the HTTP ``status_code``.

    Instances are treated as immutable: use ``with_message()`` to derive a
    new error instead of assigning to ``message``.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int | None = None,
        request_id: str | None = None,
    ) -> None:
        super().__init__(code, message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.request_id = request_id

    def __str__(self) -> str:
        if not self.code:
            return self.message
        return f"{self.code}: {self.message}"

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(code={self.code!r}, message={self.message!r}, "
            f"status_code={self.status_code!r})"
        )

    def with_message(self, message: str) -> CloudApiError:
        """Return a copy of this error carrying a different message.

        The copy keeps the class, code, status code and request id.
        """
        new = _copy_exception(self)
        new.message = message
        new.args = (self.code, message)
        return new


@dataclass(frozen=True)
class ErrorDetails:
    """Normalized structured view of an API error.

    Attributes:
        code: Machine-readable error code, e.g. "ThrottlingException".
        message: Human-readable message without the code prefix.
        status_code: Transport status code, if the error carried one.
    """

    code: str
    message: str
    status_code: int | None = None


E = TypeVar("E", bound=BaseException)


def _copy_exception(err: E) -> E:
    """Shallow-copy an exception without calling its ``__init__``.

    Exception classes rarely accept their own ``args`` back as constructor
    arguments, so ``copy.copy`` cannot be relied on. Traceback and chaining
    are not carried over.
    """
    new = type(err).__new__(type(err))
    new.__dict__.update(err.__dict__)
    new.args = err.args
    return new


def _safe_getattr(obj: Any, name: str) -> Any:
    """``getattr`` that treats any failing property as a missing attribute."""
    try:
        return getattr(obj, name, None)
    except Exception:
        return None


def _attr(obj: Any, name: str) -> Any:
    """Read an attribute that may be a plain value or a zero-arg accessor."""
    value = _safe_getattr(obj, name)
    if callable(value):
        try:
            value = value()
        except Exception:
            # Accessors that need arguments or blow up mean "no such field"
            return None
    return value


def _from_response(response: Any) -> ErrorDetails | None:
    """Read a boto-style ``{"Error": {...}, "ResponseMetadata": {...}}`` body."""
    if not isinstance(response, Mapping):
        return None
    error = response.get("Error")
    if not isinstance(error, Mapping):
        return None
    code = error.get("Code")
    if not isinstance(code, str):
        return None
    message = error.get("Message")
    metadata = response.get("ResponseMetadata")
    status_code = None
    if isinstance(metadata, Mapping) and isinstance(metadata.get("HTTPStatusCode"), int):
        status_code = metadata["HTTPStatusCode"]
    return ErrorDetails(
        code=code,
        message=message if isinstance(message, str) else "",
        status_code=status_code,
    )


def _details_of(err: BaseException) -> ErrorDetails | None:
    if isinstance(err, CloudApiError):
        return ErrorDetails(err.code, err.message, err.status_code)

    details = _from_response(_safe_getattr(err, "response"))
    if details is not None:
        return details

    code = _attr(err, "code")
    message = _attr(err, "message")
    if isinstance(code, str) and isinstance(message, str):
        status_code = _attr(err, "status_code")
        return ErrorDetails(
            code=code,
            message=message,
            status_code=status_code if isinstance(status_code, int) else None,
        )
    return None


def error_details(err: BaseException | None) -> ErrorDetails | None:
    """Extract the structured error shape from an exception.

    Understands CloudApiError, boto-style client errors exposing a
    ``response`` mapping, and any exception with string ``code`` and
    ``message`` attributes. Explicitly chained causes (``raise ... from``)
    are searched in order, outermost first.

    Never raises.

    Args:
        err: The exception to inspect. ``None`` is accepted.

    Returns:
        ErrorDetails for the first structured error in the chain, or None.
    """
    seen: set[int] = set()
    current = err
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        details = _details_of(current)
        if details is not None:
            return details
        current = current.__cause__
    return None


def replace_message(err: BaseException, message: str) -> BaseException | None:
    """Return a copy of ``err`` carrying ``message`` in place of its own.

    The copy keeps the error's class and every other field, so handlers
    written for the original type still catch it:

    - CloudApiError: see ``CloudApiError.with_message()``.
    - boto-style client errors: ``response["Error"]["Message"]`` is
      rewritten in a deep copy of the response, and the old message is
      replaced wherever it appears in the string ``args``.

    The original error is never mutated.

    Returns:
        The rewritten copy, or None if ``err`` has neither shape.
    """
    if isinstance(err, CloudApiError):
        return err.with_message(message)

    response = _safe_getattr(err, "response")
    details = _from_response(response)
    if details is None:
        return None

    new_response = dict(copy.deepcopy(response))
    new_response["Error"] = {**new_response["Error"], "Message": message}

    new = _copy_exception(err)
    new.response = new_response  # type: ignore[attr-defined]
    if details.message:
        new.args = tuple(
            arg.replace(details.message, message) if isinstance(arg, str) else arg
            for arg in err.args
        )
    return new
