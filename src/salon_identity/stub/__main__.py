"""
salon_identity.stub.__main__

Run the stub backend via `python -m salon_identity.stub`.
"""

from __future__ import annotations

import uvicorn

from salon_identity.settings import get_settings
from salon_identity.stub.app import create_app


def main() -> None:
    settings = get_settings()
    if settings.env == "prod":
        raise SystemExit("the stub backend must not run with SALON_ENV=prod")

    app = create_app(settings=settings)
    uvicorn.run(
        app,
        host=settings.stub_host,
        port=settings.stub_port,
        log_config=None,  # structlog
    )


if __name__ == "__main__":
    main()
