"""
Field validation checks.

A form element can carry a ``validation`` config listing checks to run
against its value:

    "validation": {
        "checks": [
            {"type": "required", "message": "Email is required"},
            {"type": "email", "message": "Invalid email"}
        ],
        "validateOn": "blur",
        "enabled": {"$state": "/form/submitted"}
    }

Check args may be ``{"$state": path}`` references. Unknown check types pass.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import Any, Literal
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field

from specstream.expressions.context import ResolutionContext, is_number
from specstream.expressions.resolver import resolve_dynamic_value
from specstream.expressions.visibility import evaluate_visibility

logger = logging.getLogger(__name__)

CheckFunction = Callable[[Any, dict[str, Any]], bool]

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_NUMERIC_PREFIX_RE = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+|Infinity)")


# =============================================================================
# Models
# =============================================================================


class ValidationCheck(BaseModel):
    type: str
    args: dict[str, Any] | None = None
    message: str

    model_config = ConfigDict(frozen=True)


class ValidationConfig(BaseModel):
    checks: list[ValidationCheck] | None = None
    validate_on: Literal["change", "blur", "submit"] | None = Field(default=None, alias="validateOn")
    enabled: Any = None

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class CheckResult(BaseModel):
    type: str
    valid: bool
    message: str

    model_config = ConfigDict(frozen=True)


class ValidationResult(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)
    checks: list[CheckResult] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


# =============================================================================
# Built-in checks
# =============================================================================


def _required(value: Any, args: dict[str, Any]) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return len(value.strip()) > 0
    if isinstance(value, list):
        return len(value) > 0
    return True


def _email(value: Any, args: dict[str, Any]) -> bool:
    return isinstance(value, str) and _EMAIL_RE.match(value) is not None


def _min_length(value: Any, args: dict[str, Any]) -> bool:
    bound = args.get("min")
    return isinstance(value, str) and is_number(bound) and len(value) >= bound


def _max_length(value: Any, args: dict[str, Any]) -> bool:
    bound = args.get("max")
    return isinstance(value, str) and is_number(bound) and len(value) <= bound


def _pattern(value: Any, args: dict[str, Any]) -> bool:
    pattern = args.get("pattern")
    if not isinstance(value, str) or not isinstance(pattern, str):
        return False
    try:
        return re.search(pattern, value) is not None
    except re.error:
        return False


def _min(value: Any, args: dict[str, Any]) -> bool:
    bound = args.get("min")
    return is_number(value) and is_number(bound) and value >= bound


def _max(value: Any, args: dict[str, Any]) -> bool:
    bound = args.get("max")
    return is_number(value) and is_number(bound) and value <= bound


def _numeric(value: Any, args: dict[str, Any]) -> bool:
    if is_number(value):
        return value == value  # NaN fails
    if isinstance(value, str):
        return _NUMERIC_PREFIX_RE.match(value) is not None
    return False


def _url(value: Any, args: dict[str, Any]) -> bool:
    if not isinstance(value, str):
        return False
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    return bool(parts.scheme) and bool(parts.netloc or parts.path)


def _matches(value: Any, args: dict[str, Any]) -> bool:
    return value == args.get("other")


BUILTIN_CHECKS: dict[str, CheckFunction] = {
    "required": _required,
    "email": _email,
    "minLength": _min_length,
    "maxLength": _max_length,
    "pattern": _pattern,
    "min": _min,
    "max": _max,
    "numeric": _numeric,
    "url": _url,
    "matches": _matches,
}


# =============================================================================
# Running checks
# =============================================================================


def run_validation_check(
    check: ValidationCheck | dict[str, Any],
    value: Any,
    state_model: Any,
    custom_functions: dict[str, CheckFunction] | None = None,
) -> CheckResult:
    """
    Run one check against a value.

    Args are resolved against the state model first. Built-ins take
    precedence over custom functions of the same name.
    """
    if not isinstance(check, ValidationCheck):
        check = ValidationCheck.model_validate(check)

    args = {key: resolve_dynamic_value(arg, state_model) for key, arg in (check.args or {}).items()}

    fn = BUILTIN_CHECKS.get(check.type) or (custom_functions or {}).get(check.type)
    if fn is None:
        logger.warning("Unknown validation function: %s", check.type)
        return CheckResult(type=check.type, valid=True, message=check.message)

    return CheckResult(type=check.type, valid=bool(fn(value, args)), message=check.message)


def run_validation(
    config: ValidationConfig | dict[str, Any],
    value: Any,
    state_model: Any,
    custom_functions: dict[str, CheckFunction] | None = None,
) -> ValidationResult:
    """
    Run every check of a validation config.

    When ``enabled`` is set and evaluates false, nothing runs and the
    result is valid.
    """
    if not isinstance(config, ValidationConfig):
        config = ValidationConfig.model_validate(config)

    if config.enabled is not None:
        if not evaluate_visibility(config.enabled, ResolutionContext(state_model=state_model)):
            return ValidationResult(valid=True)

    results: list[CheckResult] = []
    errors: list[str] = []
    for check in config.checks or []:
        result = run_validation_check(check, value, state_model, custom_functions)
        results.append(result)
        if not result.valid:
            errors.append(result.message)

    return ValidationResult(valid=not errors, errors=errors, checks=results)


# =============================================================================
# Builders
# =============================================================================


class check:  # noqa: N801
    """Builders for common checks, e.g. ``check.min_length(8)``."""

    @staticmethod
    def required(message: str = "This field is required") -> ValidationCheck:
        return ValidationCheck(type="required", message=message)

    @staticmethod
    def email(message: str = "Invalid email address") -> ValidationCheck:
        return ValidationCheck(type="email", message=message)

    @staticmethod
    def min_length(bound: int, message: str | None = None) -> ValidationCheck:
        return ValidationCheck(
            type="minLength", args={"min": bound}, message=message or f"Must be at least {bound} characters"
        )

    @staticmethod
    def max_length(bound: int, message: str | None = None) -> ValidationCheck:
        return ValidationCheck(
            type="maxLength", args={"max": bound}, message=message or f"Must be at most {bound} characters"
        )

    @staticmethod
    def pattern(pattern: str, message: str = "Invalid format") -> ValidationCheck:
        return ValidationCheck(type="pattern", args={"pattern": pattern}, message=message)

    @staticmethod
    def min(bound: float, message: str | None = None) -> ValidationCheck:
        return ValidationCheck(type="min", args={"min": bound}, message=message or f"Must be at least {bound}")

    @staticmethod
    def max(bound: float, message: str | None = None) -> ValidationCheck:
        return ValidationCheck(type="max", args={"max": bound}, message=message or f"Must be at most {bound}")

    @staticmethod
    def url(message: str = "Invalid URL") -> ValidationCheck:
        return ValidationCheck(type="url", message=message)

    @staticmethod
    def matches(other_path: str, message: str = "Fields must match") -> ValidationCheck:
        return ValidationCheck(type="matches", args={"other": {"$state": other_path}}, message=message)
