"""
Per-domain repository modules for database access.

Functions take an open ``Session`` and commit their own unit of work unless
documented otherwise. Joined read paths return plain dicts ready for JSON.
"""
