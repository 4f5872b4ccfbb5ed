"""
Build workspace and Ant-style file pattern resolution.

Patterns follow Ant fileset rules:

- ``*`` matches any run of characters inside one path segment
- ``?`` matches a single character inside one path segment
- ``**`` matches zero or more whole directories
- a trailing ``/`` means ``/**`` (everything below that directory)
- several patterns may be given at once, separated by commas

Patterns are always relative to the workspace root. Version-control
metadata directories are excluded the way Ant's default excludes do.

Example:
    >>> ws = Workspace("/var/lib/ci/workspace/app")
    >>> [p.name for p in ws.list("out/*.zip")]
    ['a.zip', 'b.zip']
    >>> ws.validate_ant_file_mask("*.zip")
    "'*.zip' doesn't match anything, but '**/*.zip' does. Perhaps that's what you mean?"
"""

from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional, Union

from s3publisher.utils.logging import get_logger

logger = get_logger(__name__)

# Path segments never published (Ant default excludes)
DEFAULT_EXCLUDES = frozenset([".git", ".svn", ".hg", ".bzr", "CVS", "_darcs", ".DS_Store"])


class Workspace:
    """
    Root directory of one build's files.

    Attributes:
        root: Absolute workspace directory
    """

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root).resolve()

    def __repr__(self) -> str:
        return f"Workspace({str(self.root)!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Workspace) and other.root == self.root

    def __hash__(self) -> int:
        return hash(self.root)

    def exists(self) -> bool:
        return self.root.is_dir()

    def list(self, pattern: str) -> List[Path]:
        """
        List workspace files matching an Ant-style pattern.

        Args:
            pattern: One or more comma-separated Ant patterns

        Returns:
            Matching regular files, sorted by workspace-relative path.
            Empty if nothing matches or the workspace does not exist.
        """
        if not self.exists():
            logger.warning(f"Workspace does not exist: {self.root}")
            return []

        found: Dict[str, Path] = {}
        for include in split_includes(pattern):
            glob = _to_glob(include)
            if glob is None:
                logger.warning(f"Ignoring pattern outside the workspace: {include}")
                continue
            for path in self.root.glob(glob):
                if not path.is_file():
                    continue
                relative = path.relative_to(self.root).as_posix()
                if _is_excluded(relative):
                    continue
                found.setdefault(relative, path)

        matches = [found[key] for key in sorted(found)]
        logger.debug(f"Pattern {pattern!r} matched {len(matches)} file(s) in {self.root}")
        return matches

    def validate_ant_file_mask(self, pattern: str) -> Optional[str]:
        """
        Explain why a pattern matches nothing.

        Args:
            pattern: One or more comma-separated Ant patterns

        Returns:
            Human-readable diagnostic for the first include that matches
            nothing, or None if every include matches at least one file.
        """
        if not self.exists():
            return f"Workspace {self.root} doesn't exist"

        for include in split_includes(pattern):
            if _to_glob(include) is None:
                return (
                    f"'{include}' is not a path relative to the workspace; "
                    f"patterns cannot be absolute or use '..'"
                )
            if self.list(include):
                continue

            # The usual mistake is a missing leading directory
            if not include.startswith("**"):
                deeper = f"**/{include}"
                if self.list(deeper):
                    return (
                        f"'{include}' doesn't match anything, but '{deeper}' does. "
                        f"Perhaps that's what you mean?"
                    )

            return self._explain_prefix(include)

        return None

    def _explain_prefix(self, include: str) -> str:
        segments = _normalize(include).split("/")
        for depth in range(1, len(segments)):
            prefix = "/".join(segments[:depth])
            if not self._anything_matches(prefix):
                if depth == 1:
                    return f"'{include}' doesn't match anything: even '{prefix}' doesn't exist"
                parent = "/".join(segments[: depth - 1])
                return f"'{include}' doesn't match anything: '{parent}' exists but not '{prefix}'"
        return f"'{include}' doesn't match anything"

    def _anything_matches(self, prefix: str) -> bool:
        for path in self.root.glob(prefix):
            if not _is_excluded(path.relative_to(self.root).as_posix()):
                return True
        return False


def split_includes(pattern: str) -> List[str]:
    """Split a comma-separated pattern list, dropping blanks."""
    return [part.strip() for part in pattern.split(",") if part.strip()]


def _normalize(include: str) -> str:
    include = include.replace("\\", "/")
    if include.endswith("/"):
        include += "**"
    segments = []
    for segment in include.split("/"):
        if not segment:
            continue
        if segment != "**":
            # Ant treats '**' inside a segment like '*'
            while "**" in segment:
                segment = segment.replace("**", "*")
            # pathlib would read [...] as a character class
            segment = segment.replace("[", "[[]")
        segments.append(segment)
    return "/".join(segments)


def _to_glob(include: str) -> Optional[str]:
    """Translate one Ant include into a pathlib glob, or None if it escapes."""
    if include.replace("\\", "/").startswith("/") or PurePosixPath(include).is_absolute():
        return None
    if Path(include).is_absolute():
        return None
    normalized = _normalize(include)
    if not normalized or ".." in normalized.split("/"):
        return None
    if normalized == "**" or normalized.endswith("/**"):
        normalized += "/*"
    return normalized


def _is_excluded(relative: str) -> bool:
    return any(part in DEFAULT_EXCLUDES for part in relative.split("/"))


__all__ = ["Workspace", "split_includes", "DEFAULT_EXCLUDES"]
