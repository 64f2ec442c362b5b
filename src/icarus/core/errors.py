"""Custom exception hierarchy for the platform."""


class IcarusError(Exception):
    """Base exception for all platform errors."""


# --- Configuration ---
class ConfigError(IcarusError):
    """Invalid or missing configuration."""


# --- Events ---
class InvalidEventError(IcarusError):
    """Event cannot be dispatched (e.g., empty event type)."""


# --- Domain ---
class DomainError(IcarusError):
    """A business rule was violated."""


class ValidationError(DomainError):
    """Entity data failed validation."""


class InvalidStateError(DomainError):
    """Requested transition is not allowed from the current state."""


# --- Application ---
class ApplicationError(IcarusError):
    """Use-case level failure."""


class UserAlreadyExistsError(ApplicationError):
    """A user with the same email is already registered."""

    def __init__(self, email: str):
        self.email = email
        super().__init__("User with this email already exists")


class UserNotFoundError(ApplicationError):
    """Referenced user does not exist."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User not found: {user_id}")


class UserInactiveError(ApplicationError):
    """Referenced user exists but is not active."""

    def __init__(self, user_id: str, status: str):
        self.user_id = user_id
        self.status = status
        super().__init__(f"User is not active: {user_id} (status={status})")
