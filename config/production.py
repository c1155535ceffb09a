from django.core.exceptions import ImproperlyConfigured

from .base import *

DEBUG = os.environ.get('DEBUG', 'False').lower() in ['true', '1', 't']

ALLOWED_HOSTS = os.environ.get('ALLOWED_HOSTS', '').split(',')

if SECRET_KEY == "django-insecure-change-me":
    raise ImproperlyConfigured("SECRET_KEY must be set in production")

STATIC_ROOT = BASE_DIR / "staticfiles"

# Session cookie and transport security
CSRF_COOKIE_SECURE = True
SESSION_COOKIE_SECURE = True
AUTH_COOKIE_SECURE = True
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = 'DENY'
SECURE_SSL_REDIRECT = os.environ.get('SECURE_SSL_REDIRECT', 'True').lower() in ['true', '1', 't']
SECURE_HSTS_SECONDS = int(os.environ.get('SECURE_HSTS_SECONDS', '31536000'))  # 1 year
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_REFERRER_POLICY = 'strict-origin-when-cross-origin'

EMAIL_BACKEND = "django.core.mail.backends.smtp.EmailBackend"

# Add a rotating file log next to the console output
logs_dir = BASE_DIR / "logs"
logs_dir.mkdir(exist_ok=True)

LOGGING["handlers"]["console"]["level"] = "INFO"
LOGGING["handlers"]["file"] = {
    "level": "INFO",
    "class": "logging.handlers.RotatingFileHandler",
    "filename": logs_dir / "production.log",
    "maxBytes": 1024 * 1024 * 5,  # 5 MB
    "backupCount": 5,
    "formatter": "verbose",
}
LOGGING["root"] = {"handlers": ["console", "file"], "level": "WARNING"}
for name in ("django", "apps"):
    LOGGING["loggers"][name]["handlers"] = ["console", "file"]
