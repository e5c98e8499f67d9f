"""Twinen feed ranking backend."""

__version__ = "0.3.0"
