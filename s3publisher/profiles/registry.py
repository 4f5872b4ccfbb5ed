"""
Registry of named S3 profiles.

The registry is shared by every build running on the host and by the
administrative path that reconfigures it, so it publishes an immutable
snapshot: readers never take the lock, and replace_all() swaps the whole
tuple at once. A publish that already resolved a profile keeps using it
after a replacement.
"""

import threading
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from s3publisher.profiles.profile import Profile
from s3publisher.storage.s3 import S3Client
from s3publisher.utils.logging import get_logger

logger = get_logger(__name__)


class ProfileRegistry:
    """
    Ordered set of uniquely named profiles.

    Example:
        >>> registry = ProfileRegistry([Profile("ci", "AKIA1", "s1")])
        >>> registry.resolve(None).name
        'ci'
        >>> registry.resolve("missing") is None
        True
    """

    def __init__(self, profiles: Iterable[Profile] = ()) -> None:
        self._lock = threading.Lock()
        self._profiles: Tuple[Profile, ...] = _checked(profiles)

    def __len__(self) -> int:
        return len(self._profiles)

    def __repr__(self) -> str:
        names = ", ".join(profile.name for profile in self._profiles)
        return f"ProfileRegistry([{names}])"

    def resolve(self, name: Optional[str]) -> Optional[Profile]:
        """
        Find a profile by exact name.

        Args:
            name: Profile name; None or empty selects the default profile

        Returns:
            The matching profile, the first registered profile when no name
            is given, or None if there is no match (or no profiles at all)
        """
        profiles = self._profiles
        if not name:
            return profiles[0] if profiles else None
        for profile in profiles:
            if profile.name == name:
                return profile
        return None

    def replace_all(self, profiles: Iterable[Profile]) -> None:
        """
        Install a new profile list, discarding the current one.

        Raises:
            ValueError: If two profiles share a name (nothing is replaced)
        """
        snapshot = _checked(profiles)
        with self._lock:
            self._profiles = snapshot
        logger.info(f"Profile registry replaced: {len(snapshot)} profile(s)")

    def all(self) -> List[Profile]:
        """Copy of the current profile list, in registration order."""
        return list(self._profiles)

    def names(self) -> List[str]:
        return [profile.name for profile in self._profiles]

    @classmethod
    def from_config(
        cls, entries: Sequence[Mapping[str, Any]], client: Optional[S3Client] = None
    ) -> "ProfileRegistry":
        """Build a registry from persisted ``{name, accessKey, secretKey}`` dicts."""
        return cls(Profile.from_dict(entry, client=client) for entry in entries)

    def to_config(self) -> List[dict]:
        """Persisted form of the current profile list."""
        return [profile.to_dict() for profile in self._profiles]


def _checked(profiles: Iterable[Profile]) -> Tuple[Profile, ...]:
    snapshot = tuple(profiles)
    seen = set()
    for profile in snapshot:
        if profile.name in seen:
            raise ValueError(f"Duplicate profile name: {profile.name!r}")
        seen.add(profile.name)
    return snapshot


__all__ = ["ProfileRegistry"]
