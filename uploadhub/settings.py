import os
from pathlib import Path
from dotenv import load_dotenv
from decouple import config

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
DEBUG = os.getenv("DEBUG", "True") == "True"
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "").split(",") if h.strip()] or ["*"]

INSTALLED_APPS = [
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',

    # Apps locales
    'uploads.apps.UploadsConfig',
]

MIDDLEWARE = [
    # Middleware de sécurité (doivent être en premier)
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',

    # Middleware de base
    'django.middleware.common.CommonMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',

    # Middleware personnalisé
    'uploads.middleware.UploadResponseTapMiddleware',
]

ROOT_URLCONF = 'uploadhub.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [BASE_DIR / 'templates'],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
            ],
        },
    },
]

WSGI_APPLICATION = 'uploadhub.wsgi.application'
ASGI_APPLICATION = 'uploadhub.asgi.application'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
    }
}

LANGUAGE_CODE = 'fr-fr'
TIME_ZONE = 'Europe/Paris'
USE_I18N = True
USE_TZ = True

MEDIA_URL = '/media/'
MEDIA_ROOT = BASE_DIR / 'media'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# --- Fichiers privés (uploads de formulaires) ---
# Répertoire HORS de la racine web ; créé au démarrage s'il n'existe pas
PRIVATE_UPLOADS_ROOT = config("PRIVATE_UPLOADS_ROOT", default=str(BASE_DIR / 'private_uploads'))
# Préfixe factice : aucune URL ne pointe vers un vrai fichier public
PRIVATE_UPLOADS_URL = config("PRIVATE_UPLOADS_URL", default="/__ff_private_uploads__/")

# Emplacement public où le formulaire dépose les fichiers avant relocalisation
PRIVATE_UPLOADS_PUBLIC_ROOT = config("PRIVATE_UPLOADS_PUBLIC_ROOT", default=str(MEDIA_ROOT / 'fluentform'))
PRIVATE_UPLOADS_PUBLIC_URL = config("PRIVATE_UPLOADS_PUBLIC_URL", default="")
PRIVATE_UPLOADS_MARKER = config("PRIVATE_UPLOADS_MARKER", default="fluentform")

# Liens protégés
PRIVATE_UPLOADS_LINK_ACTION = "ff_private_download"
PRIVATE_UPLOADS_LINK_MAX_AGE = config("PRIVATE_UPLOADS_LINK_MAX_AGE", default=48 * 3600, cast=int)
PRIVATE_UPLOADS_SNIFF_MIME = config("PRIVATE_UPLOADS_SNIFF_MIME", default=False, cast=bool)
PRIVATE_UPLOADS_AUTHORIZER = 'uploads.permissions.is_administrator'

# Observation des réponses d'upload (débogage)
PRIVATE_UPLOADS_DEBUG = config("PRIVATE_UPLOADS_DEBUG", default=False, cast=bool)
PRIVATE_UPLOADS_UPLOAD_ACTION = "fluentform_file_upload"
PRIVATE_UPLOADS_RESPONSE_OBSERVER = config("PRIVATE_UPLOADS_RESPONSE_OBSERVER", default="") or None

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} {process:d} {thread:d} {message}',
            'style': '{',
        },
        'simple': {
            'format': '{levelname} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
        'file': {
            'level': 'DEBUG',
            'class': 'logging.FileHandler',
            'filename': os.path.join(BASE_DIR, 'debug.log'),
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console', 'file'],
        'level': 'INFO',
    },
    'loggers': {
        'django': {
            'handlers': ['console', 'file'],
            'level': 'INFO',
            'propagate': True,
        },
        'uploads': {
            'handlers': ['console', 'file'],
            'level': 'DEBUG' if PRIVATE_UPLOADS_DEBUG else 'INFO',
            'propagate': False,
        },
        # Liens falsifiés : à surveiller séparément des simples refus
        'uploads.security': {
            'handlers': ['console', 'file'],
            'level': 'WARNING',
            'propagate': False,
        },
    },
}

# Configuration des sessions
SESSION_COOKIE_HTTPONLY = True
SESSION_COOKIE_AGE = 60 * 60 * 24 * 14  # 2 semaines

X_FRAME_OPTIONS = 'DENY'
