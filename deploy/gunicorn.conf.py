"""
Gunicorn configuration file for LabWatch production deployment.

Run with:
    DJANGO_SETTINGS_MODULE=labwatch.settings_production \
        gunicorn labwatch.wsgi:application -c deploy/gunicorn.conf.py

Gunicorn workers never start the background scheduler. Run it alongside as a
single dedicated process:
    python manage.py run_scheduler
"""

import multiprocessing
import os

# Server socket
bind = f"127.0.0.1:{os.environ.get('GUNICORN_PORT', '8000')}"
backlog = 2048

# Worker processes
workers = int(os.environ.get('GUNICORN_WORKERS', multiprocessing.cpu_count() * 2 + 1))
worker_class = "sync"
timeout = 30
graceful_timeout = 30
keepalive = 2

# Restart workers after this many requests
max_requests = 1000
max_requests_jitter = 100

preload_app = True

user = os.environ.get('GUNICORN_USER', 'www-data')
group = os.environ.get('GUNICORN_GROUP', 'www-data')

# Logging
accesslog = os.environ.get('GUNICORN_ACCESS_LOG', '/var/log/labwatch/gunicorn-access.log')
errorlog = os.environ.get('GUNICORN_ERROR_LOG', '/var/log/labwatch/gunicorn-error.log')
loglevel = os.environ.get('GUNICORN_LOG_LEVEL', 'info')
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

# Scanner kiosks sit behind the proxy; X-Forwarded-For is what attendance logs record
forwarded_allow_ips = os.environ.get('GUNICORN_FORWARDED_ALLOW_IPS', '127.0.0.1')

proc_name = 'labwatch'

daemon = False
pidfile = os.environ.get('GUNICORN_PID_FILE', '/var/run/labwatch/gunicorn.pid')
umask = 0o077

if os.environ.get('DISABLE_ACCESS_LOG', 'False').lower() == 'true':
    accesslog = None

if os.environ.get('DEBUG', 'False').lower() == 'true':
    reload = True
    loglevel = 'debug'
    workers = 1


def when_ready(server):
    """Called just after the server is started."""
    server.log.info("LabWatch server is ready. Server: %s", server.address)


def worker_int(worker):
    """Called just after a worker has been killed."""
    worker.log.info("Worker killed: %s", worker.pid)
