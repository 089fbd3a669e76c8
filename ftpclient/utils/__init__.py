"""Utility module for the FTP client engine.

- Logging: Configured logging with PII redaction
- Validators: Input validation for hosts, ports and timeouts
"""
