from typing import Optional


class TokenMetadataError(Exception):
    """Base class for every failure raised by this package."""


class ValidationError(TokenMetadataError, ValueError):
    """A field violates a cap mirrored from the on-chain program."""

    def __init__(self, field: str, message: str, limit: Optional[int] = None, actual: Optional[int] = None):
        self.field = field
        self.limit = limit
        self.actual = actual
        super().__init__(f"{field}: {message}")


class MalformedDataError(TokenMetadataError):
    """Account or instruction bytes do not match the expected layout."""


class InvalidSeedsError(TokenMetadataError, ValueError):
    pass


class AddressDerivationExhausted(TokenMetadataError):
    pass


class SigningError(TokenMetadataError):
    pass
