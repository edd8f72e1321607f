import os
from django.core.asgi import get_asgi_application

# Définir le module de paramètres Django
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'uploadhub.settings')

application = get_asgi_application()
