"""Configuration module for the FTP client engine.

- SettingsManager: JSON-based settings persistence
- CredentialManager: Secure password storage via keyring
- Paths: Application data directories
- ClientSettings: Settings dataclass
"""
