"""Campus Connect service: auth, Q&A forum, mentorship matching and events."""

__version__ = "1.0.0"
