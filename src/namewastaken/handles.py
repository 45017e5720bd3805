"""
Handle normalization and validation.

Every entry point (CLI, MCP tools, HTTP API, SDK) runs user input through
normalize_handle() before anything touches the network.
"""

import re

MAX_HANDLE_LENGTH = 30

HANDLE_PATTERN = re.compile(r"^[A-Za-z0-9._]+$")


class HandleValidationError(ValueError):
    """Raised when a handle cannot be used for a lookup."""

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


def normalize_handle(raw: str) -> str:
    """
    Normalize a user-supplied handle.

    Trims whitespace, strips leading '@' characters and lowercases the result.

    Raises:
        HandleValidationError: if the handle is empty, longer than 30
            characters, or contains anything besides letters, digits,
            dots and underscores.
    """
    handle = (raw or "").strip().lstrip("@").strip()

    if not handle:
        raise HandleValidationError("empty", "Username is required")

    if len(handle) > MAX_HANDLE_LENGTH:
        raise HandleValidationError(
            "too_long",
            f"Username is too long (max {MAX_HANDLE_LENGTH} characters)",
        )

    if not HANDLE_PATTERN.match(handle):
        raise HandleValidationError(
            "invalid_chars",
            "Username can only contain letters, numbers, dots and underscores",
        )

    return handle.lower()


def is_valid_handle(raw: str) -> bool:
    """Check if a handle would pass normalize_handle()."""
    try:
        normalize_handle(raw)
    except HandleValidationError:
        return False
    return True
