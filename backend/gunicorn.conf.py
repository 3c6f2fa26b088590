# Bind & workers
bind = "0.0.0.0:8000"
workers = 2  # override with GUNICORN_WORKERS
threads = 4
timeout = 60
graceful_timeout = 30
keepalive = 5

# Each worker builds its own app (and credential cache) after fork
preload_app = False
wsgi_app = "credo:create_app()"

# Logs to stdout/stderr; the app emits JSON lines itself
accesslog = "-"
errorlog = "-"
loglevel = "info"  # override with LOG_LEVEL

# Trust proxy headers; ProxyFix handles them inside the app
forwarded_allow_ips = "*"
proxy_protocol = False
