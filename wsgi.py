"""
WSGI Entry Point
Point gunicorn or another WSGI server at wsgi:application
"""

import os
from tillsync import create_app

application = create_app(os.environ.get('FLASK_ENV', 'production'))
