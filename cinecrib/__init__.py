"""CineCrib: movie and TV recommendations filtered by mood, services and genres."""

__version__ = "0.1.0"
