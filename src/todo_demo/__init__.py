"""
Wiz Todo App package.

Demo todo service backed by MongoDB. Exposes the application factory and a
default application instance configured from the environment.
"""

from .main import app, create_app  # noqa: F401

__all__ = ["app", "create_app"]
