"""
Error taxonomy.

- `CatalogUnavailable`: the route catalog could not be read; fatal for a request.
- `WeatherUnavailable`: the weather provider failed or timed out.
- `ProfileUnavailable`: the preference store failed; callers downgrade to "guest".
- `InvalidRequest`: bad caller input, rejected before any I/O.

Empty catalogs, empty profiles and "no candidates left" are not errors.
"""

from __future__ import annotations


class RunScoreError(Exception):
    """Base class for all RunScore errors."""


class CatalogUnavailable(RunScoreError):
    """The route catalog backing store could not be reached or parsed."""


class WeatherUnavailable(RunScoreError):
    """Current weather could not be resolved (provider error, timeout, bad payload)."""


class ProfileUnavailable(RunScoreError):
    """The preference store could not be read."""


class InvalidRequest(RunScoreError, ValueError):
    """The request is malformed (e.g., count <= 0 or an unknown time-of-day)."""
