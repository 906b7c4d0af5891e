"""
WSGI config for quality_system project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'quality_system.settings')

application = get_wsgi_application()
