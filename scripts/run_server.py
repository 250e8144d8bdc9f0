#!/usr/bin/env python3
"""
Run the pipeline board API locally.

Reads HOST, PORT and RELOAD from the environment (or .env) and serves
hr_pipeline.main:app with uvicorn.
"""

import logging
import os
import sys

import uvicorn
from dotenv import load_dotenv

# Add the project root to the Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

logger = logging.getLogger(__name__)


def main() -> None:
    load_dotenv()
    host = os.environ.get("HOST", "127.0.0.1")
    port = int(os.environ.get("PORT", "8000"))
    reload = os.environ.get("RELOAD", "").lower() in ("1", "true", "yes")

    logging.basicConfig(level=logging.INFO)
    logger.info("Serving pipeline board on http://%s:%d", host, port)
    uvicorn.run("hr_pipeline.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    main()
