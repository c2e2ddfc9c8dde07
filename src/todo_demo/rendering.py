"""
Response bodies for the human-facing and diagnostic endpoints.

Nothing in here touches the database; every function is safe to call while
the service runs in degraded mode.
"""
from __future__ import annotations

import html
import platform
from datetime import datetime, timezone
from typing import Any, Dict

from .settings import Settings

_INDEX_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
    <title>{title}</title>
    <style>
        body {{ font-family: Arial, sans-serif; margin: 40px; background: #f5f5f5; }}
        .container {{ max-width: 600px; margin: 0 auto; background: white; padding: 30px; border-radius: 8px; }}
        h1 {{ color: #333; }}
        .info {{ background: #e8f4f8; padding: 15px; border-radius: 4px; margin: 10px 0; }}
        .status {{ color: #666; font-size: 14px; }}
    </style>
</head>
<body>
    <div class="container">
        <h1>{title}</h1>
        <p>A simple todo application used to demonstrate security misconfigurations in cloud and container environments.</p>

        <div class="info">
            <strong>Application Details:</strong><br>
            MongoDB URI: {mongodb_uri}<br>
            Python Version: {python_version}<br>
            Environment: {environment}
        </div>

        <div class="info">
            <strong>Security Demo Purpose:</strong><br>
            &bull; Demonstrates container vulnerabilities<br>
            &bull; Shows database connectivity<br>
            &bull; Contains the required deployment marker file<br>
            &bull; Runs with intentional security misconfigurations
        </div>

        <p class="status">Application is running and ready for security analysis.</p>
    </div>
</body>
</html>
"""


# PUBLIC_INTERFACE
def render_index(settings: Settings) -> str:
    """Return the HTML description page."""
    return _INDEX_TEMPLATE.format(
        title=html.escape(settings.app_name),
        mongodb_uri=html.escape(settings.connection.masked_uri()),
        python_version=html.escape(platform.python_version()),
        environment=html.escape(settings.environment),
    )


# PUBLIC_INTERFACE
def build_info(settings: Settings, uptime: float) -> Dict[str, Any]:
    """
    Diagnostic payload for ``/api/info``.

    ``app``, ``version`` and ``mongodb_uri`` depend only on configuration, so
    repeated calls return the same values for them.
    """
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "mongodb_uri": settings.connection.masked_uri(),
        "python_version": platform.python_version(),
        "environment": settings.environment,
        "uptime": uptime,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# PUBLIC_INTERFACE
def check_marker(path: str, expected: str) -> Dict[str, Any]:
    """
    Read the deployment marker file and compare its trimmed contents.

    Read errors are reported in the payload instead of being raised.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read().strip()
    except (OSError, UnicodeDecodeError) as exc:
        return {"file_exists": False, "error": str(exc)}
    return {"file_exists": True, "content": content, "valid": content == expected}
