"""Configuration package for the daily puzzle service."""

from .settings import AppSettings, get_settings

__all__ = ["AppSettings", "get_settings"]
