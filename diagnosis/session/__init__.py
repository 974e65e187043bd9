"""Session state and best-effort local persistence."""

from .state import Screen, SessionState, QUESTIONS_PER_PAGE
from .storage import LocalStore, DEFAULT_STORE_KEY

__all__ = ["Screen", "SessionState", "QUESTIONS_PER_PAGE", "LocalStore", "DEFAULT_STORE_KEY"]
