from .base import *

DEBUG = True

# Print outgoing mail to the console unless a backend is configured
EMAIL_BACKEND = os.environ.get("EMAIL_BACKEND", "django.core.mail.backends.console.EmailBackend")

# Simple logging for development
LOGGING["loggers"]["apps"]["level"] = "DEBUG"
