# Bind & workers
bind = "0.0.0.0:8000"
workers = 2  # override with env GUNICORN_WORKERS
threads = 1
timeout = 60  # bounds slow password hashing and DB calls per request
graceful_timeout = 30
keepalive = 5

# Logs to stdout/stderr (collected by Docker)
accesslog = "-"
errorlog = "-"
loglevel = "info"  # override with env LOG_LEVEL

# Honour proxy headers
forwarded_allow_ips = "*"
proxy_protocol = False

wsgi_app = "vidstream:create_app()"
