"""
Logging utilities for the S3 bucket publisher.

Two audiences read the publisher's output: a person watching a CI console,
and a log shipper on the build agent. Console runs get colorized text from
coloredlogs; ``LOG_FORMAT=json`` switches to one JSON object per line.

Every record written while a publish step runs is stamped with that step's
build tag and step name (see ``build_context``), so lines from concurrent
builds on one agent can be told apart.

Example usage:
    >>> from s3publisher.utils.logging import build_context, get_logger
    >>>
    >>> logger = get_logger(__name__)
    >>> with build_context("jenkins-app-42"):
    ...     logger.info("bucket=artifacts, file=app.zip")
"""

import functools
import inspect
import json
import logging
import os
import time
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, Optional, TypeVar, cast

import coloredlogs

F = TypeVar("F", bound=Callable[..., Any])

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Name the publish step reports under in structured logs
STEP_NAME = "s3-publish"

# Arguments log_function_call never prints
REDACTED_ARGUMENTS = frozenset(["secret_key", "secret", "password", "token"])

# Attributes every LogRecord carries; anything else came in through extra=
_STANDARD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys() | {"message", "asctime"}
)


@dataclass(frozen=True)
class BuildContext:
    """Build a log record belongs to."""

    build_tag: Optional[str]
    step: str = STEP_NAME


_build_context: ContextVar[Optional[BuildContext]] = ContextVar("build_context", default=None)


@contextmanager
def build_context(build_tag: Optional[str], step: str = STEP_NAME) -> Iterator[BuildContext]:
    """
    Stamp every record logged inside the block with ``build_tag``.

    The previous context is restored on exit, so a thread that runs
    several builds one after another never leaks one build's tag into
    the next.
    """
    context = BuildContext(build_tag=build_tag, step=step)
    token = _build_context.set(context)
    try:
        yield context
    finally:
        _build_context.reset(token)


def current_build_context() -> Optional[BuildContext]:
    """Context of the publish step running in this thread/task, if any."""
    return _build_context.get()


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record, for log shippers on build agents.

    Example output:
        {"timestamp": "2026-10-19T10:30:15.123456+00:00", "level": "INFO",
         "logger": "s3publisher.publisher.publisher",
         "message": "bucket=artifacts, file=app.zip",
         "build_tag": "jenkins-app-42", "step": "s3-publish",
         "location": "publisher.py:284", "node": "agent-3"}
    """

    def format(self, record: logging.LogRecord) -> str:
        context = current_build_context()
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "build_tag": context.build_tag if context else None,
            "step": context.step if context else None,
            "location": f"{record.filename}:{record.lineno}",
            "node": os.getenv("NODE_NAME") or os.getenv("HOSTNAME", "unknown"),
        }

        extra = {k: v for k, v in vars(record).items() if k not in _STANDARD_ATTRIBUTES}
        if extra:
            payload["extra"] = extra

        if record.exc_info and record.exc_info[0] is not None:
            payload["error"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(payload, default=str)


def setup_logging(level: str = "INFO", enable_colors: bool = True) -> None:
    """
    Configure the root logger for the publisher.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_colors: Colorize console output when not logging JSON
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    if os.getenv("LOG_FORMAT", "text").lower() == "json":
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        root_logger.addHandler(handler)
    elif enable_colors:
        coloredlogs.install(level=log_level, fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT, logger=root_logger)
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        root_logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Logger for a module; pass ``__name__``."""
    return logging.getLogger(name)


def log_function_call(func: F) -> F:
    """
    Log a call's arguments, result and duration at DEBUG.

    Credential arguments (see REDACTED_ARGUMENTS) are masked. A raised
    exception is logged at WARNING with its type and re-raised unchanged;
    callers decide whether it is an error.
    """
    logger = get_logger(func.__module__)
    signature = inspect.signature(func)

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            bound = signature.bind_partial(*args, **kwargs).arguments
        except TypeError:
            bound = {}
        shown = ", ".join(
            f"{name}=***" if name in REDACTED_ARGUMENTS else f"{name}={value!r}"
            for name, value in bound.items()
        )
        logger.debug(f"call {func.__name__}({shown})", extra={"event": "call"})

        started = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.warning(
                f"{func.__name__} failed after {time.perf_counter() - started:.3f}s: "
                f"{type(e).__name__}: {e}",
                extra={"event": "failed", "error_type": type(e).__name__},
            )
            raise

        logger.debug(
            f"{func.__name__} -> {result!r} ({time.perf_counter() - started:.3f}s)",
            extra={"event": "returned"},
        )
        return result

    return cast(F, wrapper)
