import os
from pathlib import Path

import django
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / '.env')


def _env_bool(name: str, default: str = 'false') -> bool:
    return os.getenv(name, default).lower() in ('1', 'true', 'yes')


SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'insecure-dev-key-change-me')
DEBUG = _env_bool('DJANGO_DEBUG')
ALLOWED_HOSTS = [host for host in os.getenv('DJANGO_ALLOWED_HOSTS', '*').split(',') if host]

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'rest_framework',
    'assignment',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'review_service.urls'
WSGI_APPLICATION = 'review_service.wsgi.application'

# Database

DB_ENGINE = os.getenv('DB_ENGINE', 'sqlite').lower()
VALID_DB_ENGINES = ['sqlite', 'postgres']
if DB_ENGINE not in VALID_DB_ENGINES:
    raise ValueError(f"Invalid DB_ENGINE: {DB_ENGINE}. Must be one of {VALID_DB_ENGINES}")

if DB_ENGINE == 'postgres':
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': os.getenv('DB_NAME', 'review_assignment'),
            'USER': os.getenv('DB_USER', 'postgres'),
            'PASSWORD': os.getenv('DB_PASSWORD', ''),
            'HOST': os.getenv('DB_HOST', 'localhost'),
            'PORT': os.getenv('DB_PORT', '5432'),
            'CONN_MAX_AGE': int(os.getenv('DB_CONN_MAX_AGE', 60)),
        }
    }
else:
    # SQLite только для локального запуска и тестов: select_for_update там не
    # блокирует строку, параллельный писатель получает OperationalError
    # (database is locked) вместо ожидания. Блокировки строк PR - только в postgres.
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': os.getenv('DB_NAME', str(BASE_DIR / 'db.sqlite3')),
            'OPTIONS': {'timeout': 20},
        }
    }
    if django.VERSION >= (5, 1):
        # писатели берут лок в начале транзакции и ждут друг друга по timeout
        DATABASES['default']['OPTIONS']['transaction_mode'] = 'IMMEDIATE'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

USE_TZ = True
TIME_ZONE = 'UTC'

# Rest framework

REST_FRAMEWORK = {
    'DEFAULT_RENDERER_CLASSES': ['rest_framework.renderers.JSONRenderer'],
    'DEFAULT_PARSER_CLASSES': ['rest_framework.parsers.JSONParser'],
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': [],
    'UNAUTHENTICATED_USER': None,
    'TEST_REQUEST_DEFAULT_FORMAT': 'json',
}

# Reviewer assignment

# По правилам сервиса на PR назначается до 2 ревьюверов, 2 - значение по умолчанию
REVIEWERS_PER_PR = int(os.getenv('REVIEWERS_PER_PR', 2))
if REVIEWERS_PER_PR < 1:
    raise ValueError(f"Invalid REVIEWERS_PER_PR: {REVIEWERS_PER_PR}. Must be at least 1")

_seed = os.getenv('REVIEWER_RANDOM_SEED')
REVIEWER_RANDOM_SEED = int(_seed) if _seed else None

# Logging

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'keyvalue': {
            'format': 'time=%(asctime)s level=%(levelname)s logger=%(name)s msg="%(message)s"',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'keyvalue',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'assignment': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
            'propagate': False,
        },
        'django.request': {
            'handlers': ['console'],
            'level': 'ERROR',
            'propagate': False,
        },
    },
}
