"""WSGI entry point (FLASK_APP=wsgi.py, or gunicorn wsgi:app)."""
from inventree import create_app

app = create_app()

if __name__ == "__main__":
    app.run()
