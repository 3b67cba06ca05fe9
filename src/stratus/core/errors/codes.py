"""Well-known cloud API error codes.

These are plain data. The classifier and retry executor never consult them
implicitly: callers pass the codes they care about as arguments, e.g.::

    retry_on_codes(THROTTLING_CODES, lambda: client.describe_thing(...))

Codes follow the control-plane API's own spelling and are compared exactly.
"""

# =============================================================================
# Throttling
# =============================================================================

THROTTLING_EXCEPTION = "ThrottlingException"
THROTTLING = "Throttling"
REQUEST_LIMIT_EXCEEDED = "RequestLimitExceeded"
TOO_MANY_REQUESTS = "TooManyRequestsException"

THROTTLING_CODES: tuple[str, ...] = (
    THROTTLING_EXCEPTION,
    THROTTLING,
    REQUEST_LIMIT_EXCEEDED,
    TOO_MANY_REQUESTS,
)
"""Codes returned when the caller is being rate limited."""

# =============================================================================
# Eventual Consistency
# =============================================================================

INVALID_PARAMETER_VALUE = "InvalidParameterValue"
NO_SUCH_ENTITY = "NoSuchEntity"
RESOURCE_IN_USE = "ResourceInUseException"
DEPENDENCY_VIOLATION = "DependencyViolation"

EVENTUAL_CONSISTENCY_CODES: tuple[str, ...] = (
    INVALID_PARAMETER_VALUE,
    NO_SUCH_ENTITY,
    RESOURCE_IN_USE,
    DEPENDENCY_VIOLATION,
)
"""Codes that commonly clear up once a just-created dependency propagates."""

# =============================================================================
# Authorization
# =============================================================================

ACCESS_DENIED = "AccessDenied"
"""Denials of this code may carry an encoded authorization failure message."""

UNAUTHORIZED_OPERATION = "UnauthorizedOperation"

# =============================================================================
# Transport status codes
# =============================================================================

HTTP_NOT_FOUND = 404
HTTP_CONFLICT = 409
HTTP_TOO_MANY_REQUESTS = 429
HTTP_SERVICE_UNAVAILABLE = 503
