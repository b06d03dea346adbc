"""Append-only journal of matching results."""

from journal.writer import JournalWriter

__all__ = ["JournalWriter"]
