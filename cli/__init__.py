"""CLI package for running and inspecting the temperature archiver."""

from importlib import import_module
from types import ModuleType


def __getattr__(name: str) -> ModuleType:
    if name == "app":
        return import_module("cli.app")
    raise AttributeError(name)

# The Typer application lives in ``cli.app``. Re-exporting it from the package
# root would shadow the module, and tests patch attributes on that module path.

__all__ = []
