"""
WSGI config for task_sequencer project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'task_sequencer.settings')

application = get_wsgi_application()
