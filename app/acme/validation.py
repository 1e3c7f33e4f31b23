"""
Declarative form validation.

A schema is a sequence of `FieldSpec` descriptors. `validate_form()` runs every descriptor
against the raw form mapping (field name -> string) and returns either typed values or a
field-error mapping `{field: [messages]}`; it never raises for bad input.
"""
from __future__ import annotations

import math
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

EMAIL_RE = re.compile(r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+@[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?)+$")
# Plain ASCII decimal, optional sign and exponent. No "1_0", no non-ASCII digits.
DECIMAL_RE = re.compile(r"^[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?$")


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_RE.match(value or "")) and ".." not in value


@dataclass(frozen=True)
class FieldSpec:
    name: str
    required_message: str
    invalid_message: str | None = None
    kind: str = "string"  # "string" | "number"
    min_length: int = 0
    choices: tuple[str, ...] | None = None
    positive: bool = False
    email: bool = False
    # Number fields only: maps the parsed float to the stored value; `positive` is
    # checked on the result.
    convert: Callable[[float], Any] | None = None

    def check(self, raw: Any) -> tuple[Any, str | None]:
        """Return (value, None) when valid, else (None, message)."""
        if raw is None:
            return None, self.required_message
        invalid = self.invalid_message or self.required_message
        text = str(raw).strip()

        if self.kind == "number":
            if text and not DECIMAL_RE.match(text):
                return None, invalid
            number = float(text) if text else 0.0
            if math.isinf(number):
                return None, invalid
            value = self.convert(number) if self.convert is not None else number
            if self.positive and value <= 0:
                return None, invalid
            return value, None

        if len(text) < self.min_length:
            return None, invalid
        if self.choices is not None and text not in self.choices:
            return None, invalid
        if self.email and not is_valid_email(text):
            return None, invalid
        return text, None


@dataclass
class ValidationResult:
    values: dict[str, Any] = field(default_factory=dict)
    errors: dict[str, list[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


def validate_form(schema: Sequence[FieldSpec], form: Mapping[str, Any]) -> ValidationResult:
    result = ValidationResult()
    for spec in schema:
        value, message = spec.check(form.get(spec.name))
        if message is not None:
            result.errors.setdefault(spec.name, []).append(message)
        else:
            result.values[spec.name] = value
    return result


@dataclass
class ActionState:
    """What a form action hands back instead of redirecting: field errors plus a summary."""

    errors: dict[str, list[str]] = field(default_factory=dict)
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"errors": self.errors, "message": self.message}
