"""
UTILITIES PACKAGE
=================

Helpers used by the services (no HTTP, no business logic):

  time_info - utc_now_iso() for stored timestamps, timestamp_sort_key() for export ordering.
  ids       - message, conversation record and ticket identifiers.
"""
