"""Voice-driven talking points for AR glasses."""

__version__ = "0.1.0"
