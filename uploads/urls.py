# uploads/urls.py
from django.conf import settings
from django.urls import path

from . import views
from .storages import DEFAULT_PRIVATE_URL

app_name = 'uploads'

# Préfixe factice des anciennes URL ("/__ff_private_uploads__/")
legacy_prefix = getattr(settings, 'PRIVATE_UPLOADS_URL', DEFAULT_PRIVATE_URL).strip('/')

urlpatterns = [
    # Lien protégé (admin + preuve signée)
    path('fichiers/telecharger/', views.download, name='download'),

    # Anciennes URL privées -> redirection vers un lien protégé
    path(f'{legacy_prefix}/<path:suffix>', views.legacy_private_url, name='legacy_private_url'),
]
