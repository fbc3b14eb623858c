"""Command line interface for the ARK DEX adapter."""

from .main import app

__all__ = ["app"]
