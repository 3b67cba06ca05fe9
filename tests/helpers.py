"""Shared test helpers for Stratus tests."""

from typing import Any

ENCODED_MESSAGE = (
    "AccessDenied: you are not authorized. "
    "Encoded authorization failure message: AbCd123-xyz extra info"
)
DECODED_MESSAGE = (
    "AccessDenied: you are not authorized. "
    "Authorization failure message: 'DECODED_TEXT' extra info"
)


class FakeClock:
    """Monotonic clock stand-in; sleeping advances time without waiting."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class RecordingDecoder:
    """AuthorizationDecoder that records tokens and returns a fixed answer."""

    def __init__(self, answer: str = "DECODED_TEXT", error: Exception | None = None) -> None:
        self.answer = answer
        self.error = error
        self.tokens: list[str] = []

    def decode_authorization_message(self, encoded_message: str) -> str:
        self.tokens.append(encoded_message)
        if self.error is not None:
            raise self.error
        return self.answer


class FakeClientError(Exception):
    """Mimics a boto-style client error carrying a parsed response body."""

    def __init__(self, code: str, message: str, status_code: int = 400) -> None:
        super().__init__(f"An error occurred ({code}): {message}")
        self.response: dict[str, Any] = {
            "Error": {"Code": code, "Message": message},
            "ResponseMetadata": {"HTTPStatusCode": status_code},
        }


class FakeStsClient:
    """Mimics an STS client's decode_authorization_message call."""

    def __init__(self, response: Any = None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def decode_authorization_message(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


class ClientMeta:
    """The ``meta`` object handed to lifecycle functions by the engine."""

    def __init__(self, authorization_decoder: Any = None) -> None:
        self.authorization_decoder = authorization_decoder
