#!/usr/bin/env python3
"""Book tracker process entrypoint.

Responsibilities:
    1. Load a local `.env` (development convenience) before config is read.
    2. Build the Flask app through `book_tracker.startup.create_app`.
    3. Expose the WSGI `application` for production servers, or run the
       Flask development server when executed directly.
"""

from __future__ import annotations

from dotenv import load_dotenv

load_dotenv()

from book_tracker import config  # noqa: E402
from book_tracker.startup import create_app  # noqa: E402

# Expose WSGI application object: "gunicorn entrypoint.main:application"
application = create_app()


if __name__ == "__main__":  # Development server only (Flask built-in)
    application.run(
        host=config.server_host(),
        port=config.server_port(),
        debug=config.debug_enabled(),
    )
