from __future__ import annotations


class PadTaskError(RuntimeError):
    """Base class for errors raised by the chat pipeline."""


class ChatValidationError(PadTaskError):
    """Raised when a chat request is missing its session id or message."""

    public_message = "sessionId and message are required"

    def __init__(self, message: str = public_message) -> None:
        super().__init__(message)


class UpstreamCapabilityError(PadTaskError):
    """Raised when the language model could not produce a reply.

    Covers transport, quota, configuration and malformed-response failures.
    The original exception is chained; only ``public_message`` may reach
    callers.
    """

    public_message = "Failed to get response from Claude"
