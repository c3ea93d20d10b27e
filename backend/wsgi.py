# backend/wsgi.py
from pipeworks import create_app

app = create_app()
