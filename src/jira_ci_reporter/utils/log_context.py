"""Logger adapter that carries structured run fields.

A run accumulates context (project, instance, issues, state, ...) as it goes.
Instead of mutating a module-level logger, each step receives a
:class:`FieldLogger` and derives a new one with extra fields, so tests can
inspect exactly which fields were attached to each record.
"""

import logging
from collections.abc import Mapping, MutableMapping
from typing import Any, Optional


class FieldLogger(logging.LoggerAdapter):
    """LoggerAdapter that appends ``key=value`` fields to every message.

    The fields are also exposed on the emitted record as ``record.fields``.
    """

    def __init__(self, logger: logging.Logger, fields: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(logger, {})
        self.fields: dict[str, Any] = dict(fields or {})

    def with_fields(self, **fields: Any) -> "FieldLogger":
        """Return a new logger with ``fields`` merged over the current ones."""
        merged = dict(self.fields)
        merged.update(fields)
        return FieldLogger(self.logger, merged)

    def with_error(self, error: BaseException) -> "FieldLogger":
        return self.with_fields(error=str(error))

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra["fields"] = dict(self.fields)
        kwargs["extra"] = extra
        if self.fields:
            rendered = " ".join(f"{key}={value}" for key, value in self.fields.items())
            msg = f"{msg} {rendered}"
        return msg, kwargs


def get_field_logger(name: str, **fields: Any) -> FieldLogger:
    """Create a :class:`FieldLogger` for the named module logger."""
    return FieldLogger(logging.getLogger(name), fields)
