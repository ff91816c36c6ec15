#!/usr/bin/env python
"""
Server Entry Point

Usage:
    Development:  python run_server.py --dev
    Production:   python run_server.py
    Seed data:    python run_server.py --seed

    Or with Gunicorn:
    gunicorn storefront.main:app -c gunicorn.conf.py
"""

import argparse
import asyncio
import os
import subprocess

import uvicorn

from storefront.config import get_settings


def run_dev_server(port: int):
    """Run development server with auto-reload."""
    settings = get_settings()

    uvicorn.run(
        "storefront.main:app",
        host=settings.api_host,
        port=port,
        reload=True,
        reload_dirs=["storefront"],
        log_level="debug",
    )


def run_prod_server(port: int):
    """Run production server with Uvicorn directly."""
    settings = get_settings()

    uvicorn.run(
        "storefront.main:app",
        host=settings.api_host,
        port=port,
        workers=int(os.getenv("WORKERS", 4)),
        log_level=settings.monitoring.log_level.lower(),
        proxy_headers=True,
        forwarded_allow_ips="*",
        server_header=False,
    )


def run_gunicorn(port: int):
    """Run with Gunicorn (recommended for production)."""
    env = dict(os.environ, API_PORT=str(port))
    subprocess.run(["gunicorn", "storefront.main:app", "-c", "gunicorn.conf.py"], env=env, check=True)


def run_seed():
    """Populate the configured database with sample data."""
    from storefront.database.seed import seed

    asyncio.run(seed())


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Storefront API Server")
    parser.add_argument("--dev", action="store_true", help="Run in development mode with auto-reload")
    parser.add_argument("--gunicorn", action="store_true", help="Run with Gunicorn (production)")
    parser.add_argument("--seed", action="store_true", help="Seed the database and exit")
    parser.add_argument("--port", type=int, default=None, help="Port to run on (default: API_PORT)")

    args = parser.parse_args()
    port = args.port or get_settings().api_port

    if args.seed:
        run_seed()
    elif args.dev:
        run_dev_server(port)
    elif args.gunicorn:
        run_gunicorn(port)
    else:
        run_prod_server(port)
