"""Notewright: turn audio recordings into classified markdown notes."""

__version__ = "0.3.0"
