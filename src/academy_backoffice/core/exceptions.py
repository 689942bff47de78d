class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class MissingFieldError(ValidationError):
    def __init__(self, *fields: str):
        self.fields = fields
        super().__init__(f"{' and '.join(fields)} {'is' if len(fields) == 1 else 'are'} required")


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid or no user is logged in."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a requested entity does not exist."""


class ConflictError(DomainError):
    """Raised when an action clashes with the current state of a record."""


class AlreadyPunchedInError(ConflictError):
    def __init__(self, message: str = "You have already punched in today"):
        super().__init__(message)


class AlreadyPunchedOutError(ConflictError):
    def __init__(self, message: str = "You have already punched out today"):
        super().__init__(message)


class NotPunchedInError(ConflictError):
    def __init__(self, message: str = "You must punch in first"):
        super().__init__(message)


class BreakNotFoundError(NotFoundError):
    def __init__(self, break_id: str):
        self.break_id = break_id
        super().__init__("Break not found")


class BreakAlreadyEndedError(ConflictError):
    def __init__(self, break_id: str):
        self.break_id = break_id
        super().__init__("Break already ended")


class ConcurrentModificationError(ConflictError):
    def __init__(self, message: str = "Attendance record was modified concurrently, please retry"):
        super().__init__(message)
