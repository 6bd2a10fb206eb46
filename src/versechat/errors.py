"""Error taxonomy for versechat.

- ConfigurationError: missing credential or unreadable config
- TransportError: connection failure, timeout or non-success HTTP status
- DecodeError: unparseable stream payload (skipped per line)
- SessionError: invalid control command or command target
"""

from __future__ import annotations

from typing import Optional

_BODY_SNIPPET_CHARS = 500


class VersechatError(Exception):
    """Base class for all versechat errors."""


class ConfigurationError(VersechatError):
    """A required setting (usually a credential) is missing or invalid."""


class TransportError(VersechatError):
    """The HTTP exchange with a provider failed.

    Attributes:
        status_code: HTTP status when the server answered, None otherwise
        body: Response body text (trimmed)
    """

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body.strip()[:_BODY_SNIPPET_CHARS]

    @classmethod
    def from_status(cls, provider: str, status_code: int, body: str) -> TransportError:
        snippet = body.strip()[:_BODY_SNIPPET_CHARS]
        return cls(
            f"{provider} request failed with status {status_code}: {snippet}",
            status_code=status_code,
            body=body,
        )


class DecodeError(VersechatError):
    """A stream payload could not be parsed."""


class SessionError(VersechatError):
    """A chat control command could not be applied."""


__all__ = [
    "VersechatError",
    "ConfigurationError",
    "TransportError",
    "DecodeError",
    "SessionError",
]
