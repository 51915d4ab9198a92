"""Domain exceptions."""


class RecordInvalid(Exception):
    """Raised when a record fails validation on save."""

    def __init__(self, errors: dict[str, list[str]]) -> None:
        self.errors = errors
        messages = [f"{field} {message}" for field, msgs in errors.items() for message in msgs]
        super().__init__("Validation failed: " + ", ".join(messages))


class EmailTakenError(Exception):
    """Raised when the store rejects a duplicate email."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"Email {email!r} has already been taken")


class MailDeliveryError(Exception):
    """Raised when an outgoing mail could not be delivered."""
