"""Errors raised by token verification."""


class InvalidTokenError(Exception):
    """Raised when an ID token cannot be verified.

    Covers malformed tokens, unknown or unreachable signing keys, bad
    signatures and any claim that fails validation.
    """

    pass
