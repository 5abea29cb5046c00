"""Command-line front-ends for Skyjo."""

from .main import app, main

__all__ = ["app", "main"]
