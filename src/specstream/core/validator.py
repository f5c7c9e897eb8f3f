"""
Structural validation for Spec documents.

Checks a complete (or in-progress) Spec for problems a renderer cannot
recover from, and offers an auto-fix pass for the most common mistake made
by generators: putting ``visible``, ``on`` or ``repeat`` inside ``props``.

Validation never raises; issues carry a stable machine-readable code so a
caller can turn them into a repair instruction for the generator.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Element-level fields that generators often misplace inside props
ELEMENT_LEVEL_FIELDS = ("visible", "on", "repeat")


class IssueSeverity(StrEnum):
    """Severity of a validation issue."""

    ERROR = "error"
    WARNING = "warning"


class IssueCode(StrEnum):
    """Machine-readable issue codes."""

    MISSING_ROOT = "missing_root"
    ROOT_NOT_FOUND = "root_not_found"
    EMPTY_SPEC = "empty_spec"
    MISSING_CHILD = "missing_child"
    VISIBLE_IN_PROPS = "visible_in_props"
    ON_IN_PROPS = "on_in_props"
    REPEAT_IN_PROPS = "repeat_in_props"
    ORPHANED_ELEMENT = "orphaned_element"


_MISPLACED_CODES = {
    "visible": IssueCode.VISIBLE_IN_PROPS,
    "on": IssueCode.ON_IN_PROPS,
    "repeat": IssueCode.REPEAT_IN_PROPS,
}


class SpecIssue(BaseModel):
    """A single validation finding."""

    severity: IssueSeverity = Field(description="error fails validation, warning does not")
    message: str = Field(description="Human-readable description")
    code: IssueCode = Field(description="Stable issue code")
    element_key: str | None = Field(default=None, description="Offending element key")

    model_config = ConfigDict(frozen=True)


class SpecValidationResult(BaseModel):
    """Result of validate_spec()."""

    valid: bool
    issues: list[SpecIssue] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def errors(self) -> list[SpecIssue]:
        return [i for i in self.issues if i.severity == IssueSeverity.ERROR]

    @property
    def warnings(self) -> list[SpecIssue]:
        return [i for i in self.issues if i.severity == IssueSeverity.WARNING]

    def codes(self) -> list[IssueCode]:
        return [i.code for i in self.issues]


class AutoFixResult(BaseModel):
    """Result of auto_fix_spec(): the corrected copy and what was changed."""

    spec: dict[str, Any]
    fixes: list[str] = Field(default_factory=list)


def _elements(spec: dict[str, Any]) -> dict[str, Any]:
    elements = spec.get("elements")
    return elements if isinstance(elements, dict) else {}


def _misplaced_fields(element: Any) -> list[str]:
    if not isinstance(element, dict):
        return []
    props = element.get("props")
    if not isinstance(props, dict):
        return []
    return [name for name in ELEMENT_LEVEL_FIELDS if props.get(name) is not None]


def _reachable(elements: dict[str, Any], root: str) -> set[str]:
    reachable: set[str] = set()
    stack = [root] if root in elements else []
    while stack:
        key = stack.pop()
        if key in reachable:
            continue
        reachable.add(key)
        element = elements[key]
        children = element.get("children") if isinstance(element, dict) else None
        for child_key in children or []:
            if isinstance(child_key, str) and child_key in elements and child_key not in reachable:
                stack.append(child_key)
    return reachable


def validate_spec(spec: dict[str, Any], check_orphans: bool = False) -> SpecValidationResult:
    """
    Validate the structure of a Spec.

    Checks:
    - Root is set (short-circuits when missing)
    - Root key exists in elements
    - Elements map is not empty (short-circuits when empty)
    - Every child key refers to an existing element
    - visible/on/repeat are not nested inside props (each reported separately)
    - Unreachable elements (only with check_orphans; warnings)

    Args:
        spec: The Spec document
        check_orphans: Also report elements not reachable from root

    Returns:
        SpecValidationResult; valid is False iff any error-severity issue exists
    """
    issues: list[SpecIssue] = []
    root = spec.get("root")

    if not isinstance(root, str) or not root:
        issues.append(
            SpecIssue(
                severity=IssueSeverity.ERROR,
                message="Spec has no root element defined.",
                code=IssueCode.MISSING_ROOT,
            )
        )
        return SpecValidationResult(valid=False, issues=issues)

    elements = _elements(spec)

    if root not in elements:
        issues.append(
            SpecIssue(
                severity=IssueSeverity.ERROR,
                message=f'Root element "{root}" not found in elements map.',
                code=IssueCode.ROOT_NOT_FOUND,
            )
        )

    if not elements:
        issues.append(
            SpecIssue(
                severity=IssueSeverity.ERROR,
                message="Spec has no elements.",
                code=IssueCode.EMPTY_SPEC,
            )
        )
        return SpecValidationResult(valid=False, issues=issues)

    for key, element in elements.items():
        children = element.get("children") if isinstance(element, dict) else None
        for child_key in children or []:
            if not isinstance(child_key, str) or child_key not in elements:
                issues.append(
                    SpecIssue(
                        severity=IssueSeverity.ERROR,
                        message=(
                            f'Element "{key}" references child "{child_key}" '
                            f"which does not exist in the elements map."
                        ),
                        code=IssueCode.MISSING_CHILD,
                        element_key=key,
                    )
                )

        for name in _misplaced_fields(element):
            issues.append(
                SpecIssue(
                    severity=IssueSeverity.ERROR,
                    message=(
                        f'Element "{key}" has "{name}" inside "props". It should be a '
                        f"top-level field on the element (sibling of type/props/children)."
                    ),
                    code=_MISPLACED_CODES[name],
                    element_key=key,
                )
            )

    if check_orphans:
        reachable = _reachable(elements, root)
        for key in elements:
            if key not in reachable:
                issues.append(
                    SpecIssue(
                        severity=IssueSeverity.WARNING,
                        message=f'Element "{key}" is not reachable from root "{root}".',
                        code=IssueCode.ORPHANED_ELEMENT,
                        element_key=key,
                    )
                )

    valid = not any(i.severity == IssueSeverity.ERROR for i in issues)
    return SpecValidationResult(valid=valid, issues=issues)


def auto_fix_spec(spec: dict[str, Any]) -> AutoFixResult:
    """
    Move visible/on/repeat out of props to the element level.

    The input is left untouched; the result holds a corrected copy and one
    human-readable message per moved field.
    """
    fixes: list[str] = []
    fixed_elements: dict[str, Any] = {}

    for key, element in _elements(spec).items():
        misplaced = _misplaced_fields(element)
        if not misplaced:
            fixed_elements[key] = element
            continue
        props = dict(element["props"])
        fixed = {**element}
        for name in misplaced:
            fixed[name] = props.pop(name)
            fixes.append(f'Moved "{name}" from props to element level on "{key}".')
        fixed["props"] = props
        fixed_elements[key] = fixed

    fixed_spec: dict[str, Any] = {"root": spec.get("root"), "elements": fixed_elements}
    if "state" in spec:
        fixed_spec["state"] = spec["state"]
    return AutoFixResult(spec=fixed_spec, fixes=fixes)


def format_spec_issues(issues: list[SpecIssue]) -> str:
    """
    Turn error issues into a repair instruction for the generator.

    Returns an empty string when there are no errors.
    """
    errors = [i for i in issues if i.severity == IssueSeverity.ERROR]
    if not errors:
        return ""
    lines = ["The generated UI spec has the following errors:"]
    for issue in errors:
        lines.append(f"- {issue.message}")
    return "\n".join(lines)
