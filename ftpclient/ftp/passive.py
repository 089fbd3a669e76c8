"""Passive mode endpoint parsing and data socket setup."""

import re
import socket
from dataclasses import dataclass
from typing import Optional, Tuple

from ftpclient.ftp.exceptions import (
    FTPConnectionError,
    FTPProtocolError,
    FTPTimeoutError,
)
from ftpclient.ftp.reply import Reply


PASV_GROUP = re.compile(r"\(([^)]*)\)")
PASV_NUMBER = re.compile(r"\d{1,3}", re.ASCII)


@dataclass(frozen=True)
class PassiveEndpoint:
    """Data connection address announced by a 227 reply."""
    host: str
    port: int

    @property
    def address(self) -> Tuple[str, int]:
        return (self.host, self.port)


def parse_pasv_reply(reply: Reply) -> PassiveEndpoint:
    """
    Extract the data endpoint from a PASV reply.

    Format: 227 Entering Passive Mode (h1,h2,h3,h4,p1,p2)

    Args:
        reply: Reply to the PASV command

    Returns:
        PassiveEndpoint with host h1.h2.h3.h4 and port p1*256+p2

    Raises:
        FTPProtocolError: If the parenthesized group is malformed
    """
    match = PASV_GROUP.search(str(reply))
    if not match:
        raise FTPProtocolError("No address in passive mode reply", reply)

    parts = [part.strip() for part in match.group(1).split(",")]
    if len(parts) != 6 or not all(PASV_NUMBER.fullmatch(part) for part in parts):
        raise FTPProtocolError("Malformed passive mode address", reply)

    numbers = [int(part) for part in parts]
    if any(number > 255 for number in numbers):
        raise FTPProtocolError("Passive mode address component out of range", reply)

    host = ".".join(str(octet) for octet in numbers[:4])
    port = numbers[4] * 256 + numbers[5]
    return PassiveEndpoint(host=host, port=port)


def open_data_connection(
    endpoint: PassiveEndpoint,
    timeout: Optional[float] = 30
) -> socket.socket:
    """
    Connect to a passive data endpoint.

    Raises:
        FTPConnectionError: If the socket cannot be established
        FTPTimeoutError: If the connect times out
    """
    try:
        return socket.create_connection(endpoint.address, timeout=timeout)
    except socket.timeout:
        raise FTPTimeoutError("Data connection", timeout)
    except OSError as e:
        raise FTPConnectionError(endpoint.host, endpoint.port, e)
