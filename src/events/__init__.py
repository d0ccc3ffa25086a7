"""Structured event logging package."""

from src.events.logger import EventLogger, create_correlation_id

__all__ = ["EventLogger", "create_correlation_id"]
