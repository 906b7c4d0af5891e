"""
Django settings for quality_system project.
"""

import os
from decimal import Decimal
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / '.env')

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'django-insecure-quality-system-dev-key')
DEBUG = os.environ.get('DJANGO_DEBUG', '1') == '1'

ALLOWED_HOSTS = [h.strip() for h in os.environ.get('DJANGO_ALLOWED_HOSTS', '*').split(',') if h.strip()]

# =========================================================
# APLICACIONES Y MIDDLEWARE
# =========================================================
INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    'channels',
    'rest_framework',

    'operators.apps.OperatorsConfig',
    'products.apps.ProductsConfig',
    'quality.apps.QualityConfig',
    'defects.apps.DefectsConfig',
    'alerts.apps.AlertsConfig',
    'certificates.apps.CertificatesConfig',
    'nonconformities.apps.NonconformitiesConfig',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'quality_system.urls'
WSGI_APPLICATION = 'quality_system.wsgi.application'
ASGI_APPLICATION = 'quality_system.asgi.application'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

# =========================================================
# BASE DE DATOS
# =========================================================
DB_ENGINE = os.environ.get('DB_ENGINE', 'django.db.backends.sqlite3')

if DB_ENGINE == 'django.db.backends.sqlite3':
    DATABASES = {
        'default': {
            'ENGINE': DB_ENGINE,
            'NAME': os.environ.get('DB_NAME', str(BASE_DIR / 'db.sqlite3')),
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': DB_ENGINE,
            'NAME': os.environ.get('DB_NAME', 'quality_system'),
            'USER': os.environ.get('DB_USER', ''),
            'PASSWORD': os.environ.get('DB_PASSWORD', ''),
            'HOST': os.environ.get('DB_HOST', 'localhost'),
            'PORT': os.environ.get('DB_PORT', ''),
        }
    }

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# =========================================================
# LOCALIZACIÓN
# =========================================================
LANGUAGE_CODE = 'es'
TIME_ZONE = os.environ.get('TZ', 'America/Lima')
USE_I18N = True
USE_TZ = True

STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'
MEDIA_URL = '/media/'
MEDIA_ROOT = Path(os.environ.get('MEDIA_ROOT', BASE_DIR / 'media'))

# =========================================================
# DRF
# =========================================================
REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'rest_framework.authentication.SessionAuthentication',
        'rest_framework.authentication.BasicAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
    'DEFAULT_RENDERER_CLASSES': ['rest_framework.renderers.JSONRenderer'],
    'DEFAULT_PARSER_CLASSES': ['rest_framework.parsers.JSONParser'],
    'EXCEPTION_HANDLER': 'quality.exceptions.api_exception_handler',
}

# =========================================================
# CHANNELS
# =========================================================
REDIS_URL = os.environ.get('REDIS_URL', '')

if REDIS_URL:
    CHANNEL_LAYERS = {
        'default': {
            'BACKEND': 'channels_redis.core.RedisChannelLayer',
            'CONFIG': {'hosts': [REDIS_URL]},
        }
    }
else:
    CHANNEL_LAYERS = {
        'default': {'BACKEND': 'channels.layers.InMemoryChannelLayer'}
    }

# =========================================================
# CORREO
# =========================================================
EMAIL_BACKEND = os.environ.get('EMAIL_BACKEND', 'django.core.mail.backends.smtp.EmailBackend')
EMAIL_HOST = os.environ.get('MAIL_HOST', 'smtp.gmail.com')
EMAIL_PORT = int(os.environ.get('MAIL_PORT', '587'))
EMAIL_HOST_USER = os.environ.get('MAIL_USER', '')
EMAIL_HOST_PASSWORD = os.environ.get('MAIL_PASSWORD', '')
EMAIL_USE_TLS = os.environ.get('MAIL_USE_TLS', 'true') == 'true'
EMAIL_TIMEOUT = int(os.environ.get('MAIL_TIMEOUT', '10'))
DEFAULT_FROM_EMAIL = os.environ.get('MAIL_FROM', EMAIL_HOST_USER or 'calidad@localhost')

# =========================================================
# REGLAS DE CALIDAD
# =========================================================
QUALITY_DEFAULT_ALERT_THRESHOLD = Decimal(os.environ.get('ALERT_DEFAULT_THRESHOLD', '5.0'))
QUALITY_MAIL_ENABLED = os.environ.get('MAIL_ENABLED', 'false') == 'true'
QUALITY_PAGE_SIZE = int(os.environ.get('QUALITY_PAGE_SIZE', '20'))
QUALITY_MAX_PAGE_SIZE = int(os.environ.get('QUALITY_MAX_PAGE_SIZE', '100'))
QUALITY_CODE_MAX_ATTEMPTS = int(os.environ.get('QUALITY_CODE_MAX_ATTEMPTS', '5'))

# =========================================================
# LOGGING
# =========================================================
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} {levelname} {name} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': os.environ.get('DJANGO_LOG_LEVEL', 'WARNING'),
            'propagate': False,
        },
        **{
            app: {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False}
            for app in ['quality', 'alerts', 'certificates', 'nonconformities', 'defects', 'products', 'operators']
        },
    },
}
