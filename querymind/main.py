"""QueryMind entry point.

Serves the relay API and the NiceGUI chat UI from one uvicorn process:
/api/* and /health are FastAPI routes, / and /auth are NiceGUI pages.
"""

import logging
import os
import sys

from dotenv import load_dotenv

# .env must be loaded before the config modules read the environment
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


def main() -> None:
    """Start the combined API + UI server.

    The chat page talks to the relay over HTTP; unless API_BASE_URL says
    otherwise it points at this same process.
    """
    import uvicorn
    from nicegui import ui

    from querymind.api.app import create_app
    from querymind.ui import auth_page, chat_page  # noqa: F401 - Registers the pages

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    os.environ.setdefault("API_BASE_URL", f"http://localhost:{port}")

    app = create_app()
    ui.run_with(
        app,
        title="QueryMind",
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "querymind-secret"),
    )

    logger.info(f"QueryMind listening on http://{host}:{port} (API docs at /docs)")
    uvicorn.run(app, host=host, port=port, log_level=os.getenv("LOG_LEVEL", "info").lower())


if __name__ == "__main__":
    main()
