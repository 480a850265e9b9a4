"""Application bootstrap helpers for the Flashcard Review Scheduler project."""

from .runtime import ReviewServices, bootstrap, build_services
from .settings import AppSettings

__all__ = ["AppSettings", "ReviewServices", "bootstrap", "build_services"]
