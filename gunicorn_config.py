from decouple import config

PORT = config('PORT', default=10000, cast=int)  # Same default as app.py
bind = f"0.0.0.0:{PORT}"
workers = 2
threads = 4
wsgi_app = "app:app"
