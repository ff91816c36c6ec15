"""
Production Server Configuration

Run FastAPI with Uvicorn workers under Gunicorn for production deployment.
"""

import multiprocessing
import os

# Server socket
bind = os.getenv("BIND", f"{os.getenv('API_HOST', '0.0.0.0')}:{os.getenv('API_PORT', '8000')}")
backlog = 2048

# Worker processes
# Each worker holds its own database pool of POSTGRES_POOL_SIZE connections
workers = int(os.getenv("WORKERS", min(multiprocessing.cpu_count() * 2 + 1, 8)))
worker_class = "uvicorn.workers.UvicornWorker"
max_requests = 10000
max_requests_jitter = 1000
timeout = 60
keepalive = 5
graceful_timeout = 30

proc_name = "storefront-api"

# Logging is handled by structlog inside the app
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
accesslog = None


def when_ready(server):
    """Called when server is ready to receive connections."""
    server.log.info("storefront-api ready on %s with %s workers", bind, workers)


def worker_abort(worker):
    """Called when worker receives SIGABRT signal, usually a request timeout."""
    worker.log.warning("Worker %s aborted", worker.pid)
