"""FTP-specific exceptions for the FTP client engine.

Custom exception hierarchy that keeps "the protocol or transport broke"
apart from "the server said no" (the latter is a plain False return).
"""

from typing import Optional


class FTPError(Exception):
    """Base exception for all FTP-related errors."""

    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class FTPConnectionError(FTPError):
    """Failed to establish a control or data connection."""

    def __init__(self, host: str, port: int, original_error: Exception = None):
        self.host = host
        self.port = port
        message = f"Failed to connect to {host}:{port}"
        super().__init__(message, original_error)


class FTPTimeoutError(FTPError):
    """Socket connect or read timed out."""

    def __init__(self, operation: str = "Operation", timeout: Optional[float] = 30):
        self.operation = operation
        self.timeout = timeout
        message = f"{operation} timed out after {timeout} seconds"
        super().__init__(message)


class FTPProtocolError(FTPError):
    """Reply could not be parsed, or its code breaks an operation's precondition."""

    def __init__(self, message: str, reply=None):
        self.reply = reply
        if reply is not None:
            message = f"{message}. Response: {reply}"
        super().__init__(message)


class FTPStateError(FTPError):
    """Operation attempted outside its required session state."""

    def __init__(self, operation: str = "Operation", reason: str = "not connected"):
        self.operation = operation
        self.reason = reason
        message = f"{operation} failed: {reason}"
        super().__init__(message)


class FTPStreamError(FTPError):
    """Read or write failure on the control stream, a data stream or a local file."""
