"""Discord interactions webhook for the server listing directory."""

__version__ = '1.0.0'
