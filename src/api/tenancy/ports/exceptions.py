"""Store exceptions for the tenancy bounded context.

Store implementations raise these instead of driver-specific errors so
that the router can fail closed without knowing the backing technology.
"""


class StoreError(Exception):
    """Base exception for tenant directory and user store failures."""

    pass


class StoreUnavailableError(StoreError):
    """Raised when the backing store cannot be reached or errors.

    The router treats this as a failed lookup and redirects rather than
    surfacing a server error.
    """

    pass


class InvalidRecordError(StoreError):
    """Raised when a stored record cannot be mapped to a domain object.

    For example a user row whose role is not a known role.
    """

    pass
