import os

wsgi_app = "produce_api.main:app"
bind = f"0.0.0.0:{os.getenv('PORT','8000')}"
# Collections live in process memory; a second worker would hold its own copy
workers = 1
worker_class = "uvicorn.workers.UvicornWorker"
timeout = int(os.getenv("TIMEOUT", "30"))
keepalive = 5
graceful_timeout = 30
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
