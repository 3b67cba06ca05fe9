"""Transparent decoding of encoded authorization failure messages."""

from stratus.authz.decoder import (
    ENCODED_FAILURE_MESSAGE_PATTERN,
    AuthorizationDecoder,
    EncodedAuthorizationMessage,
    StsAuthorizationDecoder,
    decode_error,
    find_encoded_token,
)
from stratus.authz.decoration import (
    DecoderGetter,
    LifecycleOperation,
    decorate_all,
    decorate_resource,
    decoder_from_meta,
    is_decorated,
)

__all__ = [
    "ENCODED_FAILURE_MESSAGE_PATTERN",
    "AuthorizationDecoder",
    "DecoderGetter",
    "EncodedAuthorizationMessage",
    "LifecycleOperation",
    "StsAuthorizationDecoder",
    "decode_error",
    "decorate_all",
    "decorate_resource",
    "decoder_from_meta",
    "find_encoded_token",
    "is_decorated",
]
