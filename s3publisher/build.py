"""
Build host model consumed by the publisher.

The build pipeline itself lives elsewhere; the publisher only needs a
finished build's outcome, its environment variables, a workspace to read
files from, and a log to write user-facing lines to.
"""

import sys
import threading
import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, TextIO

from s3publisher.workspace import Workspace


class Result(str, Enum):
    """
    Build outcome, ordered from best to worst.

    Values:
        SUCCESS: Build and all steps passed
        UNSTABLE: Soft failure, later steps still run
        FAILURE: Hard failure
    """

    SUCCESS = "SUCCESS"
    UNSTABLE = "UNSTABLE"
    FAILURE = "FAILURE"

    @property
    def ordinal(self) -> int:
        return _ORDER[self]

    def is_worse_than(self, other: "Result") -> bool:
        return self.ordinal > other.ordinal

    @classmethod
    def parse(cls, value: str) -> "Result":
        """Parse a result name case-insensitively."""
        try:
            return cls(value.strip().upper())
        except ValueError:
            raise ValueError(
                f"Unknown build result: {value!r} "
                f"(valid: {', '.join(r.value for r in cls)})"
            ) from None


_ORDER = {Result.SUCCESS: 0, Result.UNSTABLE: 1, Result.FAILURE: 2}


class BuildLog:
    """
    User-facing build console.

    Lines written here are what the person looking at the build sees,
    as opposed to the module loggers which go to the agent's own logs.
    """

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self.stream = stream if stream is not None else sys.stdout

    def println(self, message: str) -> None:
        self.stream.write(message + "\n")
        self.stream.flush()

    def error(self, message: str, exc: Optional[BaseException] = None) -> None:
        """Write an ``ERROR:`` line, followed by the traceback of ``exc``."""
        self.println(f"ERROR: {message}")
        if exc is not None:
            traceback.print_exception(type(exc), exc, exc.__traceback__, file=self.stream)
            self.stream.flush()


@dataclass
class Build:
    """
    A finished (or finishing) build, as seen by a post-build step.

    Attributes:
        result: Current outcome; only ever made worse via set_result
        workspace: Root the step's file patterns are resolved against
        env_vars: Build environment used for macro expansion
    """

    result: Result
    workspace: Workspace
    env_vars: Dict[str, str] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def set_result(self, result: Result) -> None:
        """Record ``result`` unless the build is already worse."""
        with self._lock:
            if result.is_worse_than(self.result):
                self.result = result

    @property
    def tag(self) -> Optional[str]:
        """Identifier used to correlate this build's log lines."""
        return self.env_vars.get("BUILD_TAG") or self.env_vars.get("BUILD_ID")


__all__ = ["Result", "BuildLog", "Build"]
