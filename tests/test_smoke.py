"""
Smoke tests for package structure and availability.

These tests strictly verify that the package is installed correctly in the
environment and that top-level modules are importable.
"""

from __future__ import annotations

import importlib

from lifeline import __version__


def test_package_importable() -> None:
    """Ensure the top-level package can be imported."""
    mod = importlib.import_module("lifeline")
    assert mod is not None


def test_version_is_set() -> None:
    """Ensure the package exposes a valid version string."""
    assert isinstance(__version__, str)
    assert len(__version__) > 0


def test_cli_module_exposes_app() -> None:
    """The console script entry point (`lifeline.cli:app`) must exist."""
    cli = importlib.import_module("lifeline.cli")
    assert hasattr(cli, "app"), "lifeline.cli must expose an 'app' Typer object."


def test_api_factory_importable() -> None:
    api = importlib.import_module("lifeline.api")
    assert callable(api.create_app)
