"""Textual front-end for Skyjo."""

from .app import SkyjoTextualApp, run_textual_app

__all__ = ["SkyjoTextualApp", "run_textual_app"]
