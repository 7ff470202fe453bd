"""Custom exception hierarchy for the health agent."""

from typing import Any

GENERIC_FAILURE_MESSAGE = "An unexpected error occurred."


class HealthAgentError(Exception):
    """Base exception for all health agent errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


# ----- Access Errors -----


class AuthorizationDeniedError(HealthAgentError):
    """Caller identity was present but could not be admitted."""

    pass


class IdentityDecodeError(AuthorizationDeniedError):
    """Identity header could not be decoded or parsed."""

    def __init__(self) -> None:
        super().__init__(message="Failed to parse the authentication information.")


class DomainNotAllowedError(AuthorizationDeniedError):
    """Identity does not belong to the allowed domain."""

    def __init__(self) -> None:
        super().__init__(
            message="Access denied. Please sign in with an account from the allowed domain."
        )


# ----- Request Errors -----


class ClientInputError(HealthAgentError):
    """Request body is missing or malformed."""

    pass


# ----- Configuration Errors -----


class ConfigurationError(HealthAgentError):
    """A required upstream credential is not configured."""

    pass


# ----- Orchestration Errors -----


class OrchestrationError(HealthAgentError):
    """The tool session or one of the model rounds failed."""

    @classmethod
    def from_exception(cls, exc: BaseException) -> "OrchestrationError":
        if isinstance(exc, OrchestrationError):
            return exc
        message = getattr(exc, "message", None) or str(exc) or GENERIC_FAILURE_MESSAGE
        return cls(message=message, details={"cause": type(exc).__name__})


class ToolSessionError(HealthAgentError):
    """The in-process MCP session could not serve a request."""

    pass


class SessionClosedError(ToolSessionError):
    """The tool session was used after it was closed."""

    def __init__(self) -> None:
        super().__init__(message="The tool session is already closed.")
