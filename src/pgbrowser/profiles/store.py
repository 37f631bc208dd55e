from __future__ import annotations

import pathlib
from datetime import datetime, timezone
from typing import Dict, List, Optional, Union
from uuid import UUID

import yaml
from pydantic import TypeAdapter

from pgbrowser.common.logger import get_logger
from pgbrowser.profiles.models import ConnectionProfile

logger = get_logger(__name__)

_PROFILE_LIST = TypeAdapter(List[ConnectionProfile])


class ProfileStore:
    """
    Saved connection profiles persisted as a YAML list.

    Profiles are looked up by id or by name. The file is read on every call,
    so several processes sharing it see each other's edits.
    """

    def __init__(self, path: Union[str, pathlib.Path]):
        self.path = pathlib.Path(path).expanduser()

    def _load(self) -> Dict[UUID, ConnectionProfile]:
        if not self.path.exists():
            return {}

        raw = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        if not raw:
            return {}
        if isinstance(raw, dict) and "connections" in raw:
            raw = raw["connections"] or []
        if not isinstance(raw, list):
            raise ValueError(f"Invalid config structure in {self.path}. Expected 'connections' list.")

        return {profile.id: profile for profile in _PROFILE_LIST.validate_python(raw)}

    def _dump(self, profiles: Dict[UUID, ConnectionProfile]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"connections": [p.model_dump(mode="json") for p in profiles.values()]}
        self.path.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")

    def _find(self, profiles: Dict[UUID, ConnectionProfile], key: Union[str, UUID]) -> Optional[ConnectionProfile]:
        if isinstance(key, UUID):
            return profiles.get(key)
        try:
            profile = profiles.get(UUID(key))
        except ValueError:
            profile = None
        if profile is not None:
            return profile
        return next((p for p in profiles.values() if p.name == key), None)

    def list(self) -> List[ConnectionProfile]:
        """Returns all profiles ordered by name."""
        return sorted(self._load().values(), key=lambda p: p.name.lower())

    def recent(self) -> List[ConnectionProfile]:
        """Returns profiles most recently used first; never-used profiles come last."""
        floor = datetime.min.replace(tzinfo=timezone.utc)
        return sorted(
            self._load().values(),
            key=lambda p: _aware(p.last_used) if p.last_used else floor,
            reverse=True,
        )

    def get(self, key: Union[str, UUID]) -> ConnectionProfile:
        """
        Retrieves a profile by id or name.

        Raises:
            KeyError: If no profile matches.
        """
        profile = self._find(self._load(), key)
        if profile is None:
            raise KeyError(f"Connection profile '{key}' not found")
        return profile

    def save(self, profile: ConnectionProfile) -> ConnectionProfile:
        """Creates or replaces the profile with the same id."""
        profiles = self._load()
        profiles[profile.id] = profile
        self._dump(profiles)
        logger.info(f"Saved connection profile '{profile.name}' ({profile.id})")
        return profile

    def delete(self, key: Union[str, UUID]) -> ConnectionProfile:
        profiles = self._load()
        profile = self._find(profiles, key)
        if profile is None:
            raise KeyError(f"Connection profile '{key}' not found")
        del profiles[profile.id]
        self._dump(profiles)
        logger.info(f"Deleted connection profile '{profile.name}' ({profile.id})")
        return profile

    def touch(self, key: Union[str, UUID]) -> ConnectionProfile:
        """Stamps ``last_used`` with the current time."""
        profiles = self._load()
        profile = self._find(profiles, key)
        if profile is None:
            raise KeyError(f"Connection profile '{key}' not found")
        profile = profile.model_copy(update={"last_used": datetime.now(timezone.utc)})
        profiles[profile.id] = profile
        self._dump(profiles)
        return profile


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
