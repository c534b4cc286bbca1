class ValidationError(ValueError):
    """Bad input rejected before any mutation (email, date, renewal term...)."""


class NotFoundError(LookupError):
    """Referenced customer does not exist."""


class AuthorizationError(PermissionError):
    """Missing or mismatched admin session / scheduler secret."""
