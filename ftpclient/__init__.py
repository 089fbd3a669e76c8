"""FTP client engine: control channel, passive-mode transfers and session state."""

__version__ = "0.1.0"
