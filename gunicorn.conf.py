# gunicorn 'app:create_app()' -c gunicorn.conf.py
import multiprocessing
import os

# Bind / workers / threads
bind = os.getenv("BIND", f"0.0.0.0:{os.getenv('PORT', '3000')}")
workers = int(os.getenv("WEB_CONCURRENCY", str(max(2, multiprocessing.cpu_count() // 2))))
threads = int(os.getenv("WEB_THREADS", "4"))

# Worker timeout must outlast one completion call (up to 4000 output tokens)
worker_class = "gthread"
timeout = int(os.getenv("WEB_TIMEOUT", "120"))
graceful_timeout = int(os.getenv("WEB_GRACEFUL_TIMEOUT", "30"))
keepalive = int(os.getenv("WEB_KEEPALIVE", "5"))

# Logging
loglevel = os.getenv("LOG_LEVEL", "info")
accesslog = "-"   # stdout
errorlog = "-"    # stderr
capture_output = True

forwarded_allow_ips = os.getenv("FORWARDED_ALLOW_IPS", "127.0.0.1")
preload_app = True


def when_ready(server):
    server.log.info("Enhancement backend ready on %s", bind)
