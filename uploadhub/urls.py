from django.urls import path, include

urlpatterns = [
    # Fichiers privés des formulaires (liens réservés aux administrateurs)
    path('', include('uploads.urls')),
]
