"""Music review site backend: reviews, moderation and likes."""
__version__ = "0.1.0"
