"""Pytest configuration and shared fixtures for FTP client engine tests."""

import socket
from dataclasses import dataclass
from pathlib import Path
from typing import Generator, Tuple

import pytest

from tests.integration.mock_ftp_server import MockFTPServer


# Test constants
TEST_FTP_HOST = "127.0.0.1"
TEST_FTP_USER = "testuser"
TEST_FTP_PASS = "testpass"


@dataclass
class MockFTPConfig:
    """Credentials used against test FTP servers."""
    host: str = TEST_FTP_HOST
    username: str = TEST_FTP_USER
    password: str = TEST_FTP_PASS


@pytest.fixture
def ftp_config() -> MockFTPConfig:
    """Provide mock FTP credentials for tests."""
    return MockFTPConfig()


@pytest.fixture
def socket_pair() -> Generator[Tuple[socket.socket, socket.socket], None, None]:
    """Connected (server, client) socket pair standing in for a control connection."""
    server, client = socket.socketpair()
    server.settimeout(5)
    client.settimeout(5)
    yield server, client
    server.close()
    client.close()


@pytest.fixture
def temp_settings_file(tmp_path: Path) -> Path:
    """Provide a temporary settings file path for testing."""
    return tmp_path / "settings.json"


@pytest.fixture
def sample_binary_file(tmp_path: Path) -> Path:
    """Create a local file with bytes covering every value, including CR and LF."""
    path = tmp_path / "sample.bin"
    path.write_bytes(bytes(range(256)) * 40 + b"\r\n\x00tail")
    return path


@pytest.fixture
def ftp_server() -> Generator[MockFTPServer, None, None]:
    """Provide a running local FTP server backed by a temporary directory."""
    server = MockFTPServer()
    server.start()
    yield server
    server.stop()
