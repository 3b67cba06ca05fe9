"""Encoded authorization failure message decoding.

Some control-plane APIs answer an authorization denial with an opaque
encoded blob instead of a readable reason::

    AccessDenied: You are not authorized to perform this operation.
    Encoded authorization failure message: 4GIOHlTkIaWHQD0Q0m6X...

Recovering the reason ("denied by policy X, statement Y") takes a signed
round trip to a decode service. ``decode_error`` does that round trip and
swaps the blob for the decoded text. It is strictly best-effort: when the
message does not match, no decoder is available, or the decode call fails,
the original exception comes back untouched.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from stratus.core.errors import CloudApiError, error_details, replace_message
from stratus.core.logging import get_logger

_logger = get_logger("authz")

ENCODED_FAILURE_MESSAGE_PATTERN = re.compile(
    r"(.*)\s+Encoded authorization failure message: ([\w-]+)(.*)",
    re.IGNORECASE | re.DOTALL,
)
"""Splits a message into (prefix, encoded token, trailing text)."""


@runtime_checkable
class AuthorizationDecoder(Protocol):
    """Anything that can turn an encoded authorization message into text.

    Implementations raise on failure. The decode call's own timeout belongs
    to the underlying transport.
    """

    def decode_authorization_message(self, encoded_message: str) -> str: ...


class StsAuthorizationDecoder:
    """Adapts a boto3-style STS client to ``AuthorizationDecoder``.

    The client must expose
    ``decode_authorization_message(EncodedMessage=...)`` returning a mapping
    with a ``DecodedMessage`` key.
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    def decode_authorization_message(self, encoded_message: str) -> str:
        response = self._client.decode_authorization_message(EncodedMessage=encoded_message)
        if not isinstance(response, Mapping) or "DecodedMessage" not in response:
            raise ValueError("decode response carries no DecodedMessage")
        return str(response["DecodedMessage"])


@dataclass(frozen=True)
class EncodedAuthorizationMessage:
    """An error message split around its encoded authorization token.

    Attributes:
        prefix: Text before the "Encoded authorization failure message:" marker.
        token: The opaque encoded token.
        trailing: Whatever followed the token, leading whitespace included.
    """

    prefix: str
    token: str
    trailing: str

    def render(self, decoded: str) -> str:
        """Rebuild the message with the decoded text in place of the token."""
        return f"{self.prefix} Authorization failure message: '{decoded}'{self.trailing}"


def find_encoded_token(message: str) -> EncodedAuthorizationMessage | None:
    """Parse an encoded authorization failure out of ``message``.

    Returns:
        The parsed message, or None if the marker is absent.
    """
    match = ENCODED_FAILURE_MESSAGE_PATTERN.match(message)
    if match is None:
        return None
    prefix, token, trailing = match.groups()
    return EncodedAuthorizationMessage(prefix=prefix, token=token, trailing=trailing)


def _message_of(err: BaseException) -> str:
    details = error_details(err)
    if details is not None:
        return details.message
    return str(err)


def decode_error(
    decoder: AuthorizationDecoder | None,
    err: BaseException | None,
) -> BaseException | None:
    """Replace an encoded authorization failure with its decoded text.

    Args:
        decoder: Decode capability, or None when the client has none.
        err: The exception raised by an API call, or None.

    Returns:
        A new exception carrying the decoded message when decoding worked,
        otherwise ``err`` itself. CloudApiErrors and boto-style client
        errors keep their class and every field but the message. Other
        exceptions become a CloudApiError built from whatever structure
        their cause chain carries. The original is always set as
        the new exception's ``__cause__``.
    """
    if err is None or decoder is None:
        return err

    parsed = find_encoded_token(_message_of(err))
    if parsed is None:
        return err

    try:
        decoded = decoder.decode_authorization_message(parsed.token)
    except Exception as decode_exc:
        _logger.warning(
            "authz.decode_failed",
            error=str(decode_exc),
            error_type=type(decode_exc).__name__,
        )
        return err

    message = parsed.render(decoded)
    new_err = replace_message(err, message)
    if new_err is None:
        details = error_details(err)
        new_err = CloudApiError(
            code=details.code if details is not None else "",
            message=message,
            status_code=details.status_code if details is not None else None,
        )
    new_err.__cause__ = err

    _logger.info("authz.decoded", error_type=type(err).__name__)
    return new_err


__all__ = [
    "ENCODED_FAILURE_MESSAGE_PATTERN",
    "AuthorizationDecoder",
    "EncodedAuthorizationMessage",
    "StsAuthorizationDecoder",
    "decode_error",
    "find_encoded_token",
]
