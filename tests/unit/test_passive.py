"""Unit tests for passive mode endpoint parsing and data socket setup."""

import socket
from unittest.mock import MagicMock, patch

import pytest

from ftpclient.ftp.exceptions import FTPConnectionError, FTPProtocolError, FTPTimeoutError
from ftpclient.ftp.passive import PassiveEndpoint, open_data_connection, parse_pasv_reply
from ftpclient.ftp.reply import Reply


class TestParsePasvReply:
    """Tests for parse_pasv_reply."""

    def test_standard_reply(self):
        """Test port is p1*256+p2 and host is the dotted quad."""
        reply = Reply.parse("227 Entering Passive Mode (127,0,0,1,200,24)")

        endpoint = parse_pasv_reply(reply)

        assert endpoint == PassiveEndpoint(host="127.0.0.1", port=51224)
        assert endpoint.address == ("127.0.0.1", 51224)

    def test_whitespace_inside_group(self):
        reply = Reply.parse("227 Entering Passive Mode (192, 168, 1, 10, 4, 1).")
        assert parse_pasv_reply(reply) == PassiveEndpoint(host="192.168.1.10", port=1025)

    def test_extreme_values(self):
        reply = Reply.parse("227 =(0,0,0,0,255,255)")
        assert parse_pasv_reply(reply).port == 65535

    @pytest.mark.parametrize("raw", [
        "227 Entering Passive Mode",
        "227 Entering Passive Mode 127,0,0,1,200,24",
        "227 Entering Passive Mode (127,0,0,1,200)",
        "227 Entering Passive Mode (127,0,0,1,200,24,1)",
        "227 Entering Passive Mode (127,0,0,x,200,24)",
        "227 Entering Passive Mode (127,0,0,-1,200,24)",
        "227 Entering Passive Mode (127,0,0,256,200,24)",
        "227 Entering Passive Mode (127,0,0,1,256,0)",
        "227 Entering Passive Mode ()",
        "227 Entering Passive Mode (127,0,0,1,200,²)",
        "227 Entering Passive Mode (127,0,0,1,200,٢٤)",
        "227 Entering Passive Mode (127,0,0,1,0200,24)",
    ])
    def test_malformed_replies(self, raw):
        with pytest.raises(FTPProtocolError):
            parse_pasv_reply(Reply.parse(raw))


class TestOpenDataConnection:
    """Tests for open_data_connection."""

    @patch("ftpclient.ftp.passive.socket.create_connection")
    def test_connects_to_endpoint(self, mock_create):
        data_sock = MagicMock()
        mock_create.return_value = data_sock

        result = open_data_connection(PassiveEndpoint("10.0.0.5", 50000), timeout=15)

        assert result is data_sock
        mock_create.assert_called_once_with(("10.0.0.5", 50000), timeout=15)

    @patch("ftpclient.ftp.passive.socket.create_connection")
    def test_connection_refused(self, mock_create):
        mock_create.side_effect = ConnectionRefusedError("refused")

        with pytest.raises(FTPConnectionError) as exc_info:
            open_data_connection(PassiveEndpoint("10.0.0.5", 50000))

        assert exc_info.value.port == 50000

    @patch("ftpclient.ftp.passive.socket.create_connection")
    def test_timeout(self, mock_create):
        mock_create.side_effect = socket.timeout("timed out")

        with pytest.raises(FTPTimeoutError):
            open_data_connection(PassiveEndpoint("10.0.0.5", 50000), timeout=5)
