"""Study timer backend: session lifecycle, review reminders and study statistics."""

__version__ = "0.1.0"
