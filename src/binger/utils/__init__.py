"""Utility modules for Binger."""

from binger.utils.json import DateTimeEncoder

__all__ = ["DateTimeEncoder"]
