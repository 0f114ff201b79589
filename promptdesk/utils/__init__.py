"""
UTILITIES PACKAGE
=================

Helpers used by the services (no HTTP, no business logic):

  clock - utc_now(): timezone-aware current time used for every timestamp.
  retry - with_retry(fn): calls fn(); on failure retries with exponential backoff (state writes).
"""
