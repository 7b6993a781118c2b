# gunicorn -c gunicorn.conf.py
import os

wsgi_app = "authcore:create_app()"

bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.getenv("GUNICORN_WORKERS", "2"))
# Session state lives in the database or Redis, so workers share nothing
threads = int(os.getenv("GUNICORN_THREADS", "4"))
timeout = 30
graceful_timeout = 20
keepalive = 5

# JSON app logs go to stdout; gunicorn's own logs to stderr
accesslog = None
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()

# Headers are interpreted by ProxyFix (PROXY_TRUSTED_HOPS), not by gunicorn
forwarded_allow_ips = "*"
