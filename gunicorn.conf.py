"""
Production Server Configuration

Run FastAPI with Uvicorn workers under Gunicorn:
    gunicorn src.main:app -c gunicorn.conf.py
"""

import multiprocessing
import os

# Server socket
bind = os.getenv("BIND", "0.0.0.0:8000")
backlog = 2048

# Worker processes
workers = int(os.getenv("WORKERS", multiprocessing.cpu_count() * 2 + 1))
worker_class = "uvicorn.workers.UvicornWorker"
max_requests = 10000
max_requests_jitter = 1000
# must exceed ANALYTICS_STORE_TIMEOUT_SECONDS so store timeouts surface as 500s
timeout = int(os.getenv("GUNICORN_TIMEOUT", 60))
keepalive = 5
graceful_timeout = 30

proc_name = "web-analytics-api"

# Logging goes to stdout; the app formats its own lines with structlog
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
accesslog = None


def post_fork(server, worker):
    """Called after a worker has been forked."""
    server.log.info("Worker spawned (pid: %s)", worker.pid)
