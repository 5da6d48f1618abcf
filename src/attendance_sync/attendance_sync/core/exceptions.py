class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ParseError(ValidationError):
    """Raised when a vendor date/time string cannot be parsed."""


class VendorError(DomainError):
    """Raised when the vendor API rejects a request (non-retryable)."""


class VendorUnavailable(VendorError):
    """Raised on network failures, timeouts and 5xx answers (retryable)."""


class VendorMalformedResponse(VendorError):
    """Raised when the vendor answers with a body we cannot decode."""


class NoMapping(DomainError):
    """Raised when a vendor employee code has no active mapping."""


class CursorStoreUnavailable(DomainError):
    """Raised when the sync cursor cannot be read or written."""
