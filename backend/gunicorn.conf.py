import os

from tokenauth.core.config import get_config

# App & bind (testing mode listens on loopback only)
wsgi_app = "tokenauth:create_app()"
_host = "127.0.0.1" if get_config().AUTH_TESTING_MODE else "0.0.0.0"
bind = f"{_host}:{os.getenv('PORT', '8000')}"
workers = int(os.getenv("GUNICORN_WORKERS", "2"))
threads = int(os.getenv("GUNICORN_THREADS", "4"))
timeout = 60
graceful_timeout = 30
keepalive = 5

# Logs to stdout/stderr
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()

# Trust proxy headers
forwarded_allow_ips = "*"
proxy_protocol = False
