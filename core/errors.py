# =============================================================================
# core/errors.py  —  Error Types (what can go wrong, and how callers tell)
# =============================================================================
#
# Every failure raised by the core is an NFTScannerError carrying:
#   - kind:  a machine-readable ErrorKind ("configuration", "request", ...)
#   - cause: the underlying exception, if any (also chained via `raise from`)
#   - code:  the JSON-RPC error code the MCP layer reports for it
#
# ERROR FLOW:
#   RequestExecutor  ──RequestError──▶  provider client  ──▶  ToolDispatcher
#   ToolDispatcher catches once, rewraps as ToolExecutionError with the
#   tool-specific prefix ("Failed to get NFT metadata: ...") and keeps the
#   original error as .cause.
# =============================================================================

from enum import Enum
from typing import Optional

from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, METHOD_NOT_FOUND


class ErrorKind(str, Enum):
    """Machine-readable category for an NFTScannerError."""

    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    REQUEST = "request"
    PROTOCOL = "protocol"
    INTERNAL = "internal"


class NFTScannerError(Exception):
    """Base class for every error the NFT scanner raises on purpose."""

    kind: ErrorKind = ErrorKind.INTERNAL
    code: int = INTERNAL_ERROR

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        return self.message


class ConfigurationError(NFTScannerError):
    """A required setting (usually an API key) is missing or malformed."""

    kind = ErrorKind.CONFIGURATION


class ValidationError(NFTScannerError):
    """A tool was called without a required argument, or with a bad one."""

    kind = ErrorKind.VALIDATION
    code = INVALID_PARAMS


class RequestError(NFTScannerError):
    """An outbound HTTP call failed.

    Attributes:
        status: HTTP status code, or None for transport/parse failures.
        retryable: True for transient failures (429, transport errors),
            including ones that exhausted their retries.
        attempts: How many attempts were made before giving up.
    """

    kind = ErrorKind.REQUEST

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        status: Optional[int] = None,
        retryable: bool = False,
        attempts: int = 1,
    ):
        super().__init__(message, cause)
        self.status = status
        self.retryable = retryable
        self.attempts = attempts


class ProtocolError(NFTScannerError):
    """The caller asked for a tool that does not exist."""

    kind = ErrorKind.PROTOCOL
    code = METHOD_NOT_FOUND


class ToolExecutionError(NFTScannerError):
    """A tool routine failed; wraps the original error with the tool's prefix.

    The kind is inherited from the wrapped NFTScannerError so a caller can
    still tell a missing API key apart from an upstream outage.
    """

    def __init__(self, tool_name: str, message: str, cause: BaseException):
        super().__init__(message, cause)
        self.tool_name = tool_name
        if isinstance(cause, NFTScannerError):
            self.kind = cause.kind
