"""User flow modes for the talking points client."""

from .talking_points import SessionController

__all__ = [
    "SessionController",
]
