# backend/wsgi.py
from agenda import create_app

app = create_app()
