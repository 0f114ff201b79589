"""
CLOCK UTILITY
=============

Every timestamp in PromptDesk (message createdAt, session createdAt/updatedAt,
template createdAt, chat response timestamp) comes from utc_now(). Using one
timezone-aware clock keeps the ISO-8601 strings on disk comparable and makes
them round-trip to the exact same instant.
"""

import datetime


def utc_now() -> datetime.datetime:
    """Return the current time as an aware datetime in UTC."""
    return datetime.datetime.now(datetime.timezone.utc)
