"""FTP protocol module for the FTP client engine.

- Reply: Structured server replies and code bands
- ControlChannel: Command socket and reply parsing
- Passive: PASV endpoint parsing and data socket setup
- FTPSession: High-level operations and session state
- Exceptions: FTP-specific error types
"""
