"""Shared plumbing for the per-task metric payloads.

Every task has its own frozen dataclass. Numeric fields default to ``0``,
which the scoring formulas read as "not measured"; list and dict fields hold
the raw trial logs that came with the submission.
"""

from __future__ import annotations

import dataclasses
import math


class InvalidMetrics(ValueError):
    """Raised when a submitted metrics payload cannot be interpreted."""


def _coerce_number(key: str, value):
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidMetrics(f"'{key}' must be a number, got {value!r}")
    if not math.isfinite(value):
        raise InvalidMetrics(f"'{key}' must be finite, got {value!r}")
    if value < 0:
        raise InvalidMetrics(f"'{key}' must not be negative, got {value!r}")
    return value


class MetricsPayload:
    """Mixin giving a metrics dataclass JSON (de)serialisation."""

    @classmethod
    def from_dict(cls, data: dict | None):
        """Build a payload from a JSON object, ignoring unknown keys."""
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise InvalidMetrics("metrics must be a JSON object")
        kwargs = {}
        for field in dataclasses.fields(cls):
            if field.name not in data:
                continue
            value = data[field.name]
            if field.default_factory is list:
                if value is None:
                    value = []
                if not isinstance(value, list):
                    raise InvalidMetrics(f"'{field.name}' must be a list")
                kwargs[field.name] = list(value)
            elif field.default_factory is dict:
                if value is None:
                    value = {}
                if not isinstance(value, dict):
                    raise InvalidMetrics(f"'{field.name}' must be an object")
                kwargs[field.name] = dict(value)
            else:
                kwargs[field.name] = _coerce_number(field.name, value)
        return cls(**kwargs)

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)
