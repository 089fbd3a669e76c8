"""FTP session management for the FTP client engine.

Provides ConnectionState enum, FTPConnectionConfig dataclass, and
FTPSession, which sequences control channel exchanges into the
high-level operations (list, download, upload, directory management).
"""

import re
import socket
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Union

from ftpclient.config.credentials import CredentialManager
from ftpclient.config.settings import ClientSettings
from ftpclient.ftp.control import ControlChannel
from ftpclient.ftp.exceptions import (
    FTPError,
    FTPProtocolError,
    FTPStateError,
    FTPStreamError,
)
from ftpclient.ftp.passive import PassiveEndpoint, open_data_connection, parse_pasv_reply
from ftpclient.ftp.reply import Reply
from ftpclient.utils.logging import get_logger
from ftpclient.utils.validators import validate_host, validate_port, validate_timeout

logger = get_logger("ftpclient.session")

LocalPath = Union[str, Path]


class ConnectionState(Enum):
    """FTP session state."""
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class FTPConnectionConfig:
    """FTP connection configuration."""
    host: str
    port: int = 21
    username: str = "anonymous"
    timeout: int = 30
    encoding: str = "utf-8"
    block_size: int = 8192

    def __post_init__(self):
        """Validate configuration after initialization."""
        for is_valid, error in (
            validate_host(self.host),
            validate_port(self.port),
            validate_timeout(self.timeout),
        ):
            if not is_valid:
                raise ValueError(error)
        if self.block_size <= 0:
            raise ValueError(f"Block size must be positive, got {self.block_size}")

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> "FTPConnectionConfig":
        """Create a configuration from persisted client settings."""
        return cls(
            host=settings.last_host,
            port=settings.last_port,
            username=settings.last_username,
            timeout=settings.timeout,
            encoding=settings.encoding,
            block_size=settings.block_size,
        )


@dataclass
class TransferProgress:
    """Progress information for a running transfer."""
    remote_path: str
    direction: str
    bytes_transferred: int
    bytes_total: Optional[int] = None

    @property
    def percent(self) -> Optional[float]:
        """Progress as percentage (0-100), None when the size is unknown."""
        if self.bytes_total is None:
            return None
        if self.bytes_total == 0:
            return 0.0
        return (self.bytes_transferred / self.bytes_total) * 100.0


# Type alias for progress callback
ProgressCallback = Callable[[TransferProgress], None]


class FTPSession:
    """
    One FTP control connection and the operations run over it.

    Operations are synchronous and must not overlap: callers sharing a
    session across threads serialize access themselves.
    """

    def __init__(
        self,
        config: FTPConnectionConfig,
        credentials: Optional[CredentialManager] = None
    ):
        """
        Initialize an unconnected session.

        Args:
            config: Connection configuration
            credentials: Optional keyring store used when login gets no password
        """
        self._config = config
        self._credentials = credentials
        self._channel = ControlChannel(timeout=config.timeout, encoding=config.encoding)
        self._state = ConnectionState.DISCONNECTED
        self._username: Optional[str] = None
        self._welcome: Optional[Reply] = None
        self._connected_at: Optional[datetime] = None
        self._last_activity: Optional[datetime] = None

    @property
    def config(self) -> FTPConnectionConfig:
        """Connection configuration."""
        return self._config

    @property
    def state(self) -> ConnectionState:
        """Current session state."""
        return self._state

    @property
    def is_connected(self) -> bool:
        """True from a valid welcome reply until disconnect."""
        return self._state in (ConnectionState.CONNECTED, ConnectionState.AUTHENTICATED)

    @property
    def is_logged_in(self) -> bool:
        """True after a successful login."""
        return self._state == ConnectionState.AUTHENTICATED

    @property
    def username(self) -> Optional[str]:
        """Username of the last login attempt."""
        return self._username

    @property
    def welcome(self) -> Optional[Reply]:
        """Greeting reply of the current connection."""
        return self._welcome

    @property
    def connected_at(self) -> Optional[datetime]:
        """Timestamp when the connection was established."""
        return self._connected_at

    @property
    def last_activity(self) -> Optional[datetime]:
        """Timestamp of the last command sent."""
        return self._last_activity

    def __enter__(self) -> "FTPSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()

    def connect(self) -> Reply:
        """
        Open the control connection and validate the 220 welcome.

        Returns:
            The welcome reply

        Raises:
            FTPConnectionError: If the socket cannot be established
            FTPTimeoutError: If the connection times out
            FTPProtocolError: If the welcome is not a 220 reply
        """
        if self.is_connected:
            return self._welcome

        config = self._config
        logger.info(f"Connecting to {config.host}:{config.port}")
        welcome = self._channel.open(config.host, config.port)

        if welcome.code != 220:
            self._channel.close()
            raise FTPProtocolError("Unable to connect to FTP server", welcome)

        self._welcome = welcome
        self._state = ConnectionState.CONNECTED
        self._connected_at = datetime.now()
        self._last_activity = self._connected_at
        logger.info(f"Connected to {config.host}:{config.port}")
        return welcome

    def login(self, username: Optional[str] = None, password: Optional[str] = None) -> bool:
        """
        Authenticate with USER/PASS.

        Args:
            username: FTP username (defaults to the configured one)
            password: FTP password (looked up in the keyring when omitted)

        Returns:
            True if the server accepted the credentials, False otherwise

        Raises:
            FTPStateError: If not connected
        """
        self._require_connected("Login")

        username = username or self._config.username
        if password is None:
            password = self._lookup_password(username)

        self._username = username
        self._state = ConnectionState.CONNECTED

        reply = self._command(f"USER {username}")
        if reply.code == 331:
            reply = self._command(f"PASS {password}")

        if reply.code == 230:
            self._state = ConnectionState.AUTHENTICATED
            logger.info(f"Logged in as '{username}'")
            return True

        logger.warning(f"Login failed for '{username}': {reply}")
        return False

    def list_files(self, path: Optional[str] = None) -> List[str]:
        """
        List a directory over a passive data connection.

        Args:
            path: Directory to list (defaults to the working directory)

        Returns:
            Raw listing lines, in the order received

        Raises:
            FTPStateError: If not logged in
            FTPProtocolError: If any step's reply is unexpected
        """
        self._require_logged_in("List")

        data_sock = self._open_data_connection()
        try:
            reply = self._command("LIST" if path is None else f"LIST {path}")
            if not reply.is_positive_preliminary:
                raise FTPProtocolError("Could not get file listing", reply)

            try:
                lines = self._read_lines(data_sock)
            except BaseException:
                data_sock.close()
                self._discard_reply()
                raise
        finally:
            data_sock.close()

        reply = self._channel.read_reply()
        if not reply.is_positive_completion:
            raise FTPProtocolError("Error completing file listing", reply)

        logger.debug(f"Listed {len(lines)} entries")
        return lines

    def change_directory(self, path: str) -> bool:
        """Change the remote working directory. True on 250."""
        self._require_logged_in("Change directory")
        return self._simple_command(f"CWD {path}", lambda reply: reply.code == 250)

    def make_directory(self, path: str) -> bool:
        """Create a remote directory."""
        self._require_logged_in("Make directory")
        return self._simple_command(f"MKD {path}")

    def delete_file(self, name: str) -> bool:
        """Delete a remote file."""
        self._require_logged_in("Delete file")
        return self._simple_command(f"DELE {name}")

    def remove_directory(self, name: str) -> bool:
        """Remove a remote directory. Non-empty directories fail server-side."""
        self._require_logged_in("Remove directory")
        return self._simple_command(f"RMD {name}")

    def current_directory(self) -> str:
        """
        Get the remote working directory.

        Raises:
            FTPStateError: If not logged in
            FTPProtocolError: If the reply is not a 257 with a quoted path
        """
        self._require_logged_in("Print working directory")
        reply = self._command("PWD")
        if reply.code != 257:
            raise FTPProtocolError("Could not get working directory", reply)
        return _parse_257(reply)

    def download_file(
        self,
        remote_path: str,
        local_path: LocalPath,
        on_progress: Optional[ProgressCallback] = None
    ) -> bool:
        """
        Download a remote file in binary mode.

        The local file is opened only once the server has started the
        transfer. A download that fails midway leaves the partial file.

        Args:
            remote_path: Remote file name
            local_path: Local destination path
            on_progress: Optional callback for progress updates

        Returns:
            True on a 2xx completion reply, False if the server refused

        Raises:
            FTPStateError: If not logged in
            FTPProtocolError: If TYPE, PASV or RETR replies are unexpected
            FTPStreamError: If the data stream or the local file fails
        """
        self._require_logged_in("Download")
        self._set_binary_mode()

        data_sock = self._open_data_connection()
        try:
            reply = self._command(f"RETR {remote_path}")
            if not reply.is_positive_preliminary:
                return self._refused("RETR", reply)

            try:
                bytes_received = self._receive_file(
                    data_sock, local_path, remote_path, on_progress
                )
            except BaseException:
                data_sock.close()
                self._discard_reply()
                raise
        finally:
            data_sock.close()

        logger.debug(f"Received {bytes_received} bytes for {remote_path}")
        return self._finish_transfer("Download", remote_path)

    def upload_file(
        self,
        local_path: LocalPath,
        remote_path: str,
        on_progress: Optional[ProgressCallback] = None
    ) -> bool:
        """
        Upload a local file in binary mode.

        Args:
            local_path: Local source path
            remote_path: Remote file name
            on_progress: Optional callback for progress updates

        Returns:
            True on a 2xx completion reply, False if the server refused

        Raises:
            FTPStateError: If not logged in
            FTPProtocolError: If TYPE, PASV or STOR replies are unexpected
            FTPStreamError: If the local file or the data stream fails
        """
        self._require_logged_in("Upload")

        try:
            source = open(local_path, "rb")
        except OSError as e:
            raise FTPStreamError(f"Cannot open local file '{local_path}'", e)

        with source:
            self._set_binary_mode()

            data_sock = self._open_data_connection()
            try:
                reply = self._command(f"STOR {remote_path}")
                if not reply.is_positive_preliminary:
                    return self._refused("STOR", reply)

                try:
                    bytes_sent = self._send_file(
                        data_sock, source, local_path, remote_path, on_progress
                    )
                except BaseException:
                    data_sock.close()
                    self._discard_reply()
                    raise
            finally:
                data_sock.close()

        logger.debug(f"Sent {bytes_sent} bytes to {remote_path}")
        return self._finish_transfer("Upload", remote_path)

    def disconnect(self) -> None:
        """Send QUIT and close the connection. Never raises."""
        if self._channel.is_open:
            try:
                self._channel.send("QUIT")
                self._channel.read_reply()
            except Exception as e:
                # Best effort close
                logger.debug(f"Ignoring error during QUIT: {e}")
            finally:
                self._channel.close()
            logger.info("Disconnected")

        self._state = ConnectionState.DISCONNECTED
        self._welcome = None
        self._connected_at = None

    quit = disconnect

    def _require_connected(self, operation: str) -> None:
        if not self.is_connected:
            raise FTPStateError(operation, "not connected")

    def _require_logged_in(self, operation: str) -> None:
        self._require_connected(operation)
        if not self.is_logged_in:
            raise FTPStateError(operation, "not logged in")

    def _lookup_password(self, username: str) -> str:
        """Fetch a saved password, falling back to an empty one."""
        if self._credentials is None:
            return ""
        password = self._credentials.get_password(self._config.host, username)
        if password is None:
            logger.debug(f"No saved password for '{username}'")
            return ""
        return password

    def _command(self, command: str) -> Reply:
        """Send a command and read its reply."""
        self._channel.send(command)
        self._last_activity = datetime.now()
        return self._channel.read_reply()

    def _simple_command(
        self,
        command: str,
        accept: Callable[[Reply], bool] = lambda reply: reply.is_positive_completion
    ) -> bool:
        reply = self._command(command)
        if accept(reply):
            return True
        logger.warning(f"{command.split(' ', 1)[0]} refused: {reply}")
        return False

    def _set_binary_mode(self) -> None:
        reply = self._command("TYPE I")
        if reply.code != 200:
            raise FTPProtocolError("Could not set binary mode", reply)

    def _enter_passive_mode(self) -> PassiveEndpoint:
        reply = self._command("PASV")
        if reply.code != 227:
            raise FTPProtocolError("Could not enter passive mode", reply)
        return parse_pasv_reply(reply)

    def _open_data_connection(self) -> socket.socket:
        endpoint = self._enter_passive_mode()
        logger.debug(f"Opening data connection to {endpoint.host}:{endpoint.port}")
        return open_data_connection(endpoint, self._config.timeout)

    def _refused(self, verb: str, reply: Reply) -> bool:
        """Turn a negative transfer start reply into False."""
        if reply.is_negative:
            logger.warning(f"{verb} refused: {reply}")
            return False
        raise FTPProtocolError(f"Unexpected reply to {verb}", reply)

    def _finish_transfer(self, operation: str, remote_path: str) -> bool:
        reply = self._channel.read_reply()
        if reply.is_positive_completion:
            logger.info(f"{operation} of {remote_path} complete")
            return True
        logger.warning(f"{operation} of {remote_path} failed: {reply}")
        return False

    def _discard_reply(self) -> None:
        """Read the completion reply of an aborted transfer, ignoring errors."""
        try:
            self._channel.read_reply()
        except FTPError as e:
            logger.debug(f"Ignoring completion reply error: {e}")

    def _read_lines(self, data_sock: socket.socket) -> List[str]:
        encoding = self._config.encoding
        lines = []
        try:
            with data_sock.makefile("rb") as data:
                for raw in data:
                    lines.append(raw.decode(encoding, errors="replace").rstrip("\r\n"))
        except OSError as e:
            raise FTPStreamError("Failed to read listing", e)
        return lines

    def _receive_file(
        self,
        data_sock: socket.socket,
        local_path: LocalPath,
        remote_path: str,
        on_progress: Optional[ProgressCallback]
    ) -> int:
        try:
            target = open(local_path, "wb")
        except OSError as e:
            raise FTPStreamError(f"Cannot open local file '{local_path}'", e)

        bytes_received = 0
        with target:
            while True:
                try:
                    block = data_sock.recv(self._config.block_size)
                except OSError as e:
                    raise FTPStreamError("Failed to read data connection", e)
                if not block:
                    break

                try:
                    target.write(block)
                except OSError as e:
                    raise FTPStreamError(f"Failed to write local file '{local_path}'", e)

                bytes_received += len(block)
                if on_progress:
                    on_progress(TransferProgress(
                        remote_path=remote_path,
                        direction="download",
                        bytes_transferred=bytes_received,
                    ))

        return bytes_received

    def _send_file(
        self,
        data_sock: socket.socket,
        source,
        local_path: LocalPath,
        remote_path: str,
        on_progress: Optional[ProgressCallback]
    ) -> int:
        try:
            bytes_total = Path(local_path).stat().st_size
        except OSError:
            bytes_total = None

        bytes_sent = 0
        while True:
            try:
                block = source.read(self._config.block_size)
            except OSError as e:
                raise FTPStreamError(f"Failed to read local file '{local_path}'", e)
            if not block:
                break

            try:
                data_sock.sendall(block)
            except OSError as e:
                raise FTPStreamError("Failed to write data connection", e)

            bytes_sent += len(block)
            if on_progress:
                on_progress(TransferProgress(
                    remote_path=remote_path,
                    direction="upload",
                    bytes_transferred=bytes_sent,
                    bytes_total=bytes_total,
                ))

        return bytes_sent


def _parse_257(reply: Reply) -> str:
    """Extract the quoted directory name from a 257 reply."""
    match = re.search(r'"((?:[^"]|"")*)"', reply.lines[-1])
    if not match:
        raise FTPProtocolError("No directory name in reply", reply)
    return match.group(1).replace('""', '"')
