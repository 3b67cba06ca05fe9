"""Error signature predicates.

Pure functions that test whether an exception matches a transient-failure
signature. A signature is either an error code, an error code plus a message
substring, or a transport status code. Signatures are always supplied by the
caller.

Every predicate returns False for exceptions that do not carry the
structured error shape (see ``error_details``) and none of them raise.
"""

from __future__ import annotations

from collections.abc import Iterable

from .models import error_details


def matches_code(err: BaseException | None, code: str) -> bool:
    """Return True if ``err`` carries exactly ``code``."""
    details = error_details(err)
    return details is not None and details.code == code


def matches_any_code(err: BaseException | None, codes: Iterable[str]) -> bool:
    """Return True if ``err`` carries any of ``codes``.

    A bare string is treated as a single code, not as its characters.
    """
    details = error_details(err)
    if details is None:
        return False
    if isinstance(codes, str):
        return details.code == codes
    return any(details.code == code for code in codes)


def matches_code_and_message(
    err: BaseException | None,
    code: str,
    message_substring: str,
) -> bool:
    """Return True if the code matches and the message contains the substring.

    The substring test is a plain, case-sensitive containment check.
    """
    details = error_details(err)
    if details is None:
        return False
    return details.code == code and message_substring in details.message


def matches_status_code(err: BaseException | None, status_code: int) -> bool:
    """Return True if ``err`` carries the transport status code ``status_code``.

    Prefer ``matches_code()``. Status codes are only worth matching on for
    older endpoints that answer with a bare status and no error code.
    """
    details = error_details(err)
    return details is not None and details.status_code == status_code
