"""Application-level exception types for Jippity."""

from __future__ import annotations


class JippityError(Exception):
    """Base exception for Jippity."""


class ConfigurationError(JippityError):
    """Base exception for configuration and startup validation errors."""


class ApiKeyNotConfiguredError(ConfigurationError):
    """Raised when an API key is required but missing."""


class ProtocolError(JippityError):
    """A game message could not be accepted."""


class DecodeError(ProtocolError):
    """Base exception for inbound text that does not decode to a message."""


class NotStructuredData(DecodeError):
    """Raised when the text is not a JSON object."""


class MissingDiscriminator(DecodeError):
    """Raised when the message has no "command" property."""

    def __init__(self) -> None:
        super().__init__('Message is missing the "command" property')


class UnknownKind(DecodeError):
    """Raised when the "command" property names no known message kind."""

    def __init__(self, kind: str) -> None:
        super().__init__(f"Unknown command {kind!r}")
        self.kind = kind


class SchemaViolation(DecodeError):
    """Raised when a message of a known kind has the wrong shape."""

    def __init__(self, kind: str, details: str) -> None:
        super().__init__(f"Invalid {kind!r} message: {details}")
        self.kind = kind
        self.details = details


class OrderingViolation(ProtocolError):
    """Raised when a message is not allowed in the current session state."""


class RegistrationError(JippityError):
    """Base exception for actions that cannot be registered."""

    def __init__(self, action_name: str, reason: str) -> None:
        super().__init__(f"Cannot register action {action_name!r}: {reason}")
        self.action_name = action_name
        self.reason = reason


class DuplicateAction(RegistrationError):
    """Raised when an action with the same name is already registered."""

    def __init__(self, action_name: str) -> None:
        super().__init__(action_name, "an action with that name is already registered")


class InvalidActionSchema(RegistrationError):
    """Raised when an action's parameter schema is not a valid JSON schema."""

    def __init__(self, action_name: str, detail: str) -> None:
        super().__init__(action_name, f"invalid schema: {detail}")
        self.detail = detail


class InvocationFailure(JippityError):
    """The completion service returned something the session cannot continue from."""
