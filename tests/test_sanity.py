"""Sanity tests ensuring the package imports correctly."""

from __future__ import annotations

import importlib

import pytest


@pytest.mark.parametrize(
    "module_name",
    [
        "skyjo",
        "skyjo.cards",
        "skyjo.state",
        "skyjo.scoring",
        "skyjo.rules",
        "skyjo.actions",
        "skyjo.presentation",
        "skyjo.serialization",
        "skyjo.logs",
        "skyjo.cli.main",
        "skyjo.cli.textual.app",
    ],
)
def test_modules_import(module_name: str) -> None:
    """Ensure all foundational modules can be imported."""

    assert importlib.import_module(module_name)
