"""Structured logging helpers with run, package and phase correlation.

Every record emitted through a configured root handler carries ``run_id``,
``package`` and ``phase`` attributes, taken from context variables so nested
scopes restore the outer value on exit.
"""

from __future__ import annotations

import contextvars
import logging
import uuid
from contextlib import contextmanager
from typing import Iterator

UNSET = "-"

_RUN_ID_VAR: contextvars.ContextVar[str] = contextvars.ContextVar("run_id", default=UNSET)
_PACKAGE_VAR: contextvars.ContextVar[str] = contextvars.ContextVar("package", default=UNSET)
_PHASE_VAR: contextvars.ContextVar[str] = contextvars.ContextVar("phase", default=UNSET)

# Record attribute -> context variable
_CONTEXT_FIELDS = {
    "run_id": _RUN_ID_VAR,
    "package": _PACKAGE_VAR,
    "phase": _PHASE_VAR,
}

LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | run_id=%(run_id)s | package=%(package)s | "
    "phase=%(phase)s | %(name)s | %(message)s"
)


class _RunContextFilter(logging.Filter):
    """Copy the current correlation context onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for attr, var in _CONTEXT_FIELDS.items():
            setattr(record, attr, var.get(UNSET))
        return True


def configure_structured_logging(level: int = logging.INFO) -> None:
    """Configure root logging with the correlation format and filter.

    Existing root handlers are reformatted in place rather than replaced.
    """
    root_logger = logging.getLogger()
    if root_logger.handlers:
        root_logger.setLevel(level)
        for handler in root_logger.handlers:
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
    else:
        logging.basicConfig(level=level, format=LOG_FORMAT)

    for handler in root_logger.handlers:
        if not any(isinstance(f, _RunContextFilter) for f in handler.filters):
            handler.addFilter(_RunContextFilter())


def set_run_id(run_id: str | None = None) -> str:
    """Set the run correlation ID, generating one when not given."""
    value = run_id or str(uuid.uuid4())
    _RUN_ID_VAR.set(value)
    return value


def get_run_id() -> str:
    return _RUN_ID_VAR.get(UNSET)


def get_package() -> str:
    return _PACKAGE_VAR.get(UNSET)


def get_phase() -> str:
    return _PHASE_VAR.get(UNSET)


@contextmanager
def _bound(var: contextvars.ContextVar[str], value: str) -> Iterator[None]:
    token = var.set(value)
    try:
        yield
    finally:
        var.reset(token)


def package_scope(package_name: str):
    """Tag logs emitted inside the block with the package under analysis."""
    return _bound(_PACKAGE_VAR, package_name)


def phase_scope(phase: str):
    """Tag logs emitted inside the block with a pipeline phase."""
    return _bound(_PHASE_VAR, phase)
