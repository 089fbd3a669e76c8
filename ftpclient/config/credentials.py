"""Secure credential storage for the FTP client engine.

Uses the system keyring (Windows Credential Manager, macOS Keychain,
Linux Secret Service) so FTP passwords never land in the settings file.
"""

from typing import Optional

import keyring
from keyring.errors import KeyringError


class CredentialManager:
    """Password storage keyed by host and username."""

    SERVICE_NAME = "ftpclient"

    def _make_key(self, host: str, username: str) -> str:
        """
        Build the keyring entry name for an account.

        Args:
            host: FTP server host
            username: Account name on that server

        Returns:
            "host:username" entry name
        """
        return f"{host}:{username}"

    def save_password(self, host: str, username: str, password: str) -> bool:
        """
        Save an FTP password.

        Args:
            host: FTP server host
            username: Account name on that server
            password: Password to store

        Returns:
            True if saved successfully, False otherwise
        """
        try:
            keyring.set_password(self.SERVICE_NAME, self._make_key(host, username), password)
            return True
        except KeyringError:
            return False

    def get_password(self, host: str, username: str) -> Optional[str]:
        """
        Look up a saved password.

        Args:
            host: FTP server host
            username: Account name on that server

        Returns:
            The password, or None if missing or the keyring is unavailable
        """
        try:
            return keyring.get_password(self.SERVICE_NAME, self._make_key(host, username))
        except KeyringError:
            return None

    def delete_password(self, host: str, username: str) -> bool:
        """
        Remove a saved password.

        Args:
            host: FTP server host
            username: Account name on that server

        Returns:
            True if deleted successfully, False otherwise
        """
        try:
            keyring.delete_password(self.SERVICE_NAME, self._make_key(host, username))
            return True
        except KeyringError:
            return False

    def has_password(self, host: str, username: str) -> bool:
        """
        Check whether a password is stored for an account.

        Args:
            host: FTP server host
            username: Account name on that server

        Returns:
            True if a password can be retrieved
        """
        return self.get_password(host, username) is not None
