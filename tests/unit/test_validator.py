"""Tests for structural Spec validation and auto-fix."""

from __future__ import annotations

from specstream.core.validator import (
    IssueCode,
    IssueSeverity,
    auto_fix_spec,
    format_spec_issues,
    validate_spec,
)


def _spec(**elements: dict) -> dict:
    return {"root": "main", "elements": elements}


class TestValidateSpec:
    def test_valid(self) -> None:
        spec = _spec(main={"type": "Card", "props": {}, "children": ["a"]}, a={"type": "Text", "props": {}})
        result = validate_spec(spec)
        assert result.valid
        assert result.issues == []

    def test_missing_root_short_circuits(self) -> None:
        result = validate_spec({"elements": {"x": {"type": "Card", "props": {"visible": True}}}})
        assert not result.valid
        assert result.codes() == [IssueCode.MISSING_ROOT]

    def test_non_string_root_reported_not_raised(self) -> None:
        result = validate_spec({"root": {"x": 1}, "elements": {"a": {"type": "Text", "props": {}}}})
        assert not result.valid
        assert result.codes() == [IssueCode.MISSING_ROOT]

    def test_root_not_found(self) -> None:
        result = validate_spec({"root": "nope", "elements": {"a": {"type": "Text", "props": {}}}})
        assert IssueCode.ROOT_NOT_FOUND in result.codes()
        assert not result.valid

    def test_empty_elements(self) -> None:
        result = validate_spec({"root": "main", "elements": {}})
        assert result.codes() == [IssueCode.ROOT_NOT_FOUND, IssueCode.EMPTY_SPEC]

    def test_missing_child(self) -> None:
        result = validate_spec(_spec(main={"type": "Card", "props": {}, "children": ["ghost"]}))
        assert result.codes() == [IssueCode.MISSING_CHILD]
        assert result.issues[0].element_key == "main"
        assert "ghost" in result.issues[0].message

    def test_visible_in_props(self) -> None:
        result = validate_spec({"root": "x", "elements": {"x": {"type": "X", "props": {"visible": True}}}})
        assert len(result.errors) == 1
        assert result.issues[0].code == IssueCode.VISIBLE_IN_PROPS

    def test_each_misplaced_field_reported(self) -> None:
        props = {"visible": True, "on": {"press": {"action": "x"}}, "repeat": {"statePath": "/items"}}
        result = validate_spec(_spec(main={"type": "List", "props": props}))
        assert set(result.codes()) == {
            IssueCode.VISIBLE_IN_PROPS,
            IssueCode.ON_IN_PROPS,
            IssueCode.REPEAT_IN_PROPS,
        }

    def test_null_misplaced_field_ignored(self) -> None:
        result = validate_spec(_spec(main={"type": "Card", "props": {"visible": None}}))
        assert result.valid

    def test_orphans_only_when_requested(self) -> None:
        spec = _spec(main={"type": "Card", "props": {}}, stray={"type": "Text", "props": {}})
        assert validate_spec(spec).issues == []

        result = validate_spec(spec, check_orphans=True)
        assert result.valid
        assert result.codes() == [IssueCode.ORPHANED_ELEMENT]
        assert result.issues[0].severity == IssueSeverity.WARNING
        assert result.warnings[0].element_key == "stray"


class TestAutoFixSpec:
    def test_moves_visible_out_of_props(self) -> None:
        spec = {"root": "x", "elements": {"x": {"type": "X", "props": {"visible": True}}}}
        fixed = auto_fix_spec(spec)
        assert fixed.spec["elements"]["x"] == {"type": "X", "props": {}, "visible": True}
        assert len(fixed.fixes) == 1
        # input untouched
        assert spec["elements"]["x"]["props"] == {"visible": True}

    def test_fixed_spec_validates(self) -> None:
        spec = _spec(main={"type": "Button", "props": {"label": "Go", "on": {"press": {"action": "go"}}}})
        fixed = auto_fix_spec(spec)
        assert validate_spec(fixed.spec).valid
        assert fixed.spec["elements"]["main"]["props"] == {"label": "Go"}

    def test_keeps_state(self) -> None:
        spec = {**_spec(main={"type": "Card", "props": {}}), "state": {"a": 1}}
        assert auto_fix_spec(spec).spec["state"] == {"a": 1}

    def test_nothing_to_fix(self) -> None:
        spec = _spec(main={"type": "Card", "props": {}})
        fixed = auto_fix_spec(spec)
        assert fixed.fixes == []
        assert fixed.spec == spec


class TestFormatSpecIssues:
    def test_only_errors(self) -> None:
        spec = _spec(main={"type": "Card", "props": {}, "children": ["ghost"]}, stray={"type": "T", "props": {}})
        result = validate_spec(spec, check_orphans=True)
        text = format_spec_issues(result.issues)
        assert text.startswith("The generated UI spec has the following errors:")
        assert "ghost" in text
        assert "stray" not in text

    def test_empty_when_valid(self) -> None:
        assert format_spec_issues([]) == ""
