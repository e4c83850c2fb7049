"""
ASGI Entry Point for the Lifeline API.

This module exposes the `app` object required by ASGI servers (Uvicorn/Gunicorn).
It loads environment variables from `.env` first so that `LIFELINE_DATA_FILE`
and friends are visible when the settings are read.

Usage
-----
Run via the module entry point:
    $ python -m lifeline.api.server

Or via uvicorn directly:
    $ uvicorn lifeline.api.server:app --reload
"""

from pathlib import Path

import uvicorn
from dotenv import load_dotenv

load_dotenv(dotenv_path=Path(".env"))

from lifeline.api.app import create_app  # noqa: E402
from lifeline.core.settings import load_settings  # noqa: E402

# Factory invocation
app = create_app()


def main() -> None:
    """Run the API server locally for development."""
    settings = load_settings()
    print(f"[Server] Data file: {settings.data_file} (env={settings.environment})")
    uvicorn.run(
        "lifeline.api.server:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_dev,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
