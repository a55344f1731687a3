"""
Preference profile store.

Profiles are kept in a JSON file (default: `data/profiles/profiles.json`) mapping
user id -> profile payload. How that file is produced (rating history, explicit
settings) is outside the recommender.

`load_profile()` returns None for guests and unknown users so that "no preference
data" stays distinct from a stored-but-empty profile.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from runscore.core.env import resolve_project_path
from runscore.core.errors import ProfileUnavailable
from runscore.domain.models import PreferenceProfile


def is_guest(user_id: str, *, guest_prefix: str = "guest") -> bool:
    """Guest ids (`guest`, or `guest-...` such as `guest-user-1712345`) never have a history."""
    uid = (user_id or "").strip().lower()
    prefix = guest_prefix.lower()
    return not uid or uid == prefix or uid.startswith(f"{prefix}-")


class JsonProfileStore:
    """Reads profiles from a JSON mapping on every lookup."""

    def __init__(self, path: str | Path, *, guest_prefix: str = "guest"):
        self._path = path
        self._guest_prefix = guest_prefix

    def load_profile(self, user_id: str) -> PreferenceProfile | None:
        if is_guest(user_id, guest_prefix=self._guest_prefix):
            return None

        resolved = resolve_project_path(self._path)
        # A store that was never created simply has no users yet.
        if not resolved.exists():
            return None
        try:
            payload = json.loads(resolved.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ProfileUnavailable(f"Cannot read profiles at {resolved}: {e}") from e
        if not isinstance(payload, dict):
            raise ProfileUnavailable(f"Profiles at {resolved} must be a JSON object keyed by user id")

        raw = payload.get(user_id)
        if raw is None:
            return None
        try:
            return PreferenceProfile.model_validate(raw)
        except ValidationError as e:
            raise ProfileUnavailable(f"Invalid profile for user {user_id!r}: {e}") from e


class InMemoryProfileStore:
    def __init__(self, profiles: dict[str, PreferenceProfile] | None = None):
        self._profiles = dict(profiles or {})

    def load_profile(self, user_id: str) -> PreferenceProfile | None:
        return self._profiles.get(user_id)
