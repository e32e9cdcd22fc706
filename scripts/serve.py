#!/usr/bin/env python3
"""
serve.py
--------------
Run the blog persistence service (JSON API + static files) with uvicorn.

Usage:
    python scripts/serve.py [--root PATH] [--host 127.0.0.1] [--port 8000]
"""

from __future__ import annotations

import argparse
import os

import uvicorn

from cms.app import create_app
from cms.core.config import get_settings


def main() -> None:
    parser = argparse.ArgumentParser(description="Blog editor server with automatic registry updates.")
    parser.add_argument("--root", help="Content root served as static files (default: CMS_ROOT_DIR or cwd)")
    parser.add_argument("--host", help="Bind address (default: CMS_HOST or 127.0.0.1)")
    parser.add_argument("--port", type=int, help="TCP port (default: CMS_PORT or 8000)")
    parser.add_argument("--log-level", help="Logging level (default: CMS_LOG_LEVEL or INFO)")
    args = parser.parse_args()

    if args.root:
        os.environ["CMS_ROOT_DIR"] = args.root
    if args.log_level:
        os.environ["CMS_LOG_LEVEL"] = args.log_level
    get_settings.cache_clear()
    settings = get_settings()

    port = args.port or settings.port
    if port <= 0 or port > 65535:
        parser.error("Port must be between 1 and 65535.")

    app = create_app(settings)
    print(f"Serving {settings.root_dir} at http://{args.host or settings.host}:{port}/")
    print(f"Registry: {settings.registry_file}")
    print(f"Articles: {settings.articles_dir}")
    uvicorn.run(app, host=args.host or settings.host, port=port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
