"""Asynchronous, best-effort contact event notification."""

from .notifier import ContactEventNotifier, NotifierStats

__all__ = ["ContactEventNotifier", "NotifierStats"]
