from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from .gateway import Gateway
from .health import HealthReporter
from .settings import Settings


@dataclass(frozen=True)
class AppContext:
    """Everything a handler needs, built once per application instance."""

    settings: Settings
    gateway: Gateway
    reporter: HealthReporter


# PUBLIC_INTERFACE
def get_context(request: Request) -> AppContext:
    """FastAPI dependency returning the context attached to the running app."""
    return request.app.state.context
