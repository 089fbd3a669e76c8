"""FTP control channel.

Owns the single command socket of a session: sends CR LF terminated
commands and reads (possibly multi-line) replies into Reply objects.
"""

import socket
from typing import List, Optional

from ftpclient.ftp.exceptions import (
    FTPConnectionError,
    FTPProtocolError,
    FTPStateError,
    FTPStreamError,
    FTPTimeoutError,
)
from ftpclient.ftp.reply import Reply, parse_code
from ftpclient.utils.logging import get_logger

logger = get_logger("ftpclient.control")

CRLF = "\r\n"

# Longest reply line accepted from the server
MAX_LINE = 8192


class ControlChannel:
    """Request/reply exchange over the FTP command socket."""

    def __init__(self, timeout: Optional[float] = 30, encoding: str = "utf-8"):
        """
        Initialize an unopened channel.

        Args:
            timeout: Socket connect/read timeout in seconds (None = block)
            encoding: Text encoding of the control connection
        """
        self._timeout = timeout
        self._encoding = encoding
        self._sock: Optional[socket.socket] = None
        self._reader = None

    @property
    def is_open(self) -> bool:
        """True while the command socket is open."""
        return self._sock is not None

    def open(self, host: str, port: int) -> Reply:
        """
        Connect to the server and read its greeting.

        Args:
            host: Server host
            port: Server control port

        Returns:
            The greeting reply

        Raises:
            FTPStateError: If the channel is already open
            FTPConnectionError: If the socket cannot be established
            FTPTimeoutError: If connecting or reading the greeting times out
            FTPProtocolError: If the greeting is not a 2xx reply
        """
        if self.is_open:
            raise FTPStateError("Open", "control channel already open")

        try:
            self._sock = socket.create_connection((host, port), timeout=self._timeout)
        except socket.timeout:
            self._sock = None
            raise FTPTimeoutError("Connection", self._timeout)
        except OSError as e:
            self._sock = None
            raise FTPConnectionError(host, port, e)

        self._reader = self._sock.makefile("rb")
        logger.debug(f"Control connection opened to {host}:{port}")

        try:
            greeting = self.read_reply()
            if not greeting.is_positive_completion:
                raise FTPProtocolError("Unexpected greeting", greeting)
        except Exception:
            self.close()
            raise

        return greeting

    def send(self, command: str) -> None:
        """
        Send one command line, terminated by CR LF.

        Raises:
            ValueError: If the command contains CR or LF
            FTPStreamError: If the channel is closed or the write fails
        """
        if "\r" in command or "\n" in command:
            raise ValueError("Command must not contain newline characters")
        if not self.is_open:
            raise FTPStreamError("Control channel is closed")

        logger.debug(f"> {_mask_command(command)}")
        try:
            self._sock.sendall((command + CRLF).encode(self._encoding))
        except socket.timeout:
            raise FTPTimeoutError("Send", self._timeout)
        except OSError as e:
            raise FTPStreamError("Failed to send command", e)

    def read_reply(self) -> Reply:
        """
        Read one complete reply.

        A first line whose fourth character is '-' opens a multi-line
        reply, which ends at the first line starting with the same code
        followed by anything but '-'.

        Raises:
            FTPProtocolError: If a reply code cannot be parsed
            FTPStreamError: If the server closes the stream mid-reply
            FTPTimeoutError: If the read times out
        """
        line = self._read_line()
        parse_code(line)
        lines: List[str] = [line]

        if line[3:4] == "-":
            prefix = line[:3]
            while True:
                line = self._read_line()
                lines.append(line)
                if line[:3] == prefix and line[3:4] != "-":
                    break

        for reply_line in lines:
            logger.debug(f"< {reply_line}")
        return Reply.from_lines(lines)

    def _read_line(self) -> str:
        """Read a single line with its terminator stripped."""
        if not self.is_open:
            raise FTPStreamError("Control channel is closed")

        try:
            raw = self._reader.readline(MAX_LINE + 1)
        except socket.timeout:
            raise FTPTimeoutError("Reply", self._timeout)
        except OSError as e:
            raise FTPStreamError("Failed to read reply", e)

        if len(raw) > MAX_LINE:
            raise FTPProtocolError(f"Reply line longer than {MAX_LINE} bytes")
        if not raw:
            raise FTPStreamError("Connection closed by server")

        return raw.decode(self._encoding, errors="replace").rstrip("\r\n")

    def close(self) -> None:
        """Close reader and socket. Safe to call repeatedly."""
        reader, sock = self._reader, self._sock
        self._reader = None
        self._sock = None

        for resource in (reader, sock):
            if resource is None:
                continue
            try:
                resource.close()
            except OSError as e:
                logger.debug(f"Ignoring error while closing control channel: {e}")


def _mask_command(command: str) -> str:
    """Hide the argument of PASS commands."""
    if command[:5].upper() == "PASS ":
        return "PASS ****"
    return command
