"""RunScore: weather- and time-aware running route recommendations."""

__version__ = "0.1.0"
