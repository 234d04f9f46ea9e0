"""
Gunicorn configuration for the Memoria API server.

Run with: gunicorn -c gunicorn.conf.py memoria.main:app
Env vars that override defaults:
  PORT    : TCP port to bind (default: 8000)
  WORKERS : number of worker processes (default: 1)
"""
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

# The stores are SQLite files; one writer process avoids "database is locked".
workers = int(os.environ.get("WORKERS", "1"))

# Each worker runs Uvicorn's ASGI event loop inside Gunicorn's process manager.
worker_class = "uvicorn.workers.UvicornWorker"

keepalive = 5
timeout = 120

# stdout only; application logs share the stream via memoria.core.logging_config.
loglevel = os.environ.get("LOG_LEVEL", "info").lower()
accesslog = "-"
errorlog = "-"
access_log_format = '%(h)s "%(r)s" %(s)s %(b)sB %(D)sµs'

graceful_timeout = 30
