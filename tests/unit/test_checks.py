"""Tests for field validation checks."""

from __future__ import annotations

import logging

import pytest

from specstream.checks import (
    ValidationCheck,
    check,
    run_validation,
    run_validation_check,
)


class TestBuiltinChecks:
    @pytest.mark.parametrize(
        ("check_type", "value", "args", "expected"),
        [
            ("required", "x", None, True),
            ("required", "   ", None, False),
            ("required", None, None, False),
            ("required", [], None, False),
            ("required", 0, None, True),
            ("email", "ada@example.com", None, True),
            ("email", "ada@example", None, False),
            ("minLength", "abc", {"min": 3}, True),
            ("minLength", "ab", {"min": 3}, False),
            ("minLength", "abc", {"min": "3"}, False),
            ("maxLength", "abcd", {"max": 3}, False),
            ("pattern", "A-12", {"pattern": r"^[A-Z]-\d+$"}, True),
            ("pattern", "x", {"pattern": "("}, False),
            ("min", 5, {"min": 5}, True),
            ("min", "5", {"min": 1}, False),
            ("max", 6, {"max": 5}, False),
            ("numeric", "12.5kg", None, True),
            ("numeric", "kg", None, False),
            ("numeric", 3, None, True),
            ("url", "https://example.com/a", None, True),
            ("url", "not a url", None, False),
        ],
    )
    def test_check(self, check_type: str, value: object, args: dict | None, expected: bool) -> None:
        result = run_validation_check({"type": check_type, "args": args, "message": "m"}, value, {})
        assert result.valid is expected

    def test_matches_resolves_state_arg(self) -> None:
        state = {"form": {"password": "s3cret"}}
        assert run_validation_check(check.matches("/form/password"), "s3cret", state).valid
        assert not run_validation_check(check.matches("/form/password"), "other", state).valid

    def test_args_from_state(self) -> None:
        result = run_validation_check(
            {"type": "minLength", "args": {"min": {"$state": "/rules/min"}}, "message": "short"},
            "abcd",
            {"rules": {"min": 5}},
        )
        assert not result.valid
        assert result.message == "short"

    def test_unknown_type_passes(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            result = run_validation_check(ValidationCheck(type="isPrime", message="m"), 4, {})
        assert result.valid
        assert "isPrime" in caplog.text

    def test_custom_function(self) -> None:
        custom = {"even": lambda value, args: value % 2 == 0}
        assert run_validation_check({"type": "even", "message": "m"}, 4, {}, custom).valid
        assert not run_validation_check({"type": "even", "message": "m"}, 3, {}, custom).valid


class TestRunValidation:
    def test_collects_errors(self) -> None:
        config = {"checks": [check.required("Required"), check.email("Bad email")]}
        result = run_validation(config, "", {})
        assert not result.valid
        assert result.errors == ["Required", "Bad email"]
        assert len(result.checks) == 2

    def test_valid(self) -> None:
        config = {"checks": [check.min_length(2), check.max_length(4)], "validateOn": "blur"}
        assert run_validation(config, "abc", {}).valid

    def test_disabled_skips_checks(self) -> None:
        config = {"checks": [check.required()], "enabled": {"$state": "/form/submitted"}}
        skipped = run_validation(config, "", {"form": {"submitted": False}})
        assert skipped.valid
        assert skipped.checks == []

        enforced = run_validation(config, "", {"form": {"submitted": True}})
        assert enforced.errors == ["This field is required"]

    def test_builder_messages(self) -> None:
        assert check.min_length(8).message == "Must be at least 8 characters"
        assert check.max(10).args == {"max": 10}
