"""
Result types for layout validation.

A check produces ``ValidationIssue`` objects pinned to a grid cell or a room
index; a ``ValidationResult`` collects them and decides pass/fail.
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Iterable, List, Optional, Tuple


class Severity(Enum):
    """WARN keeps the layout usable, FAIL means a layout invariant is broken"""
    WARN = auto()
    FAIL = auto()

    def __str__(self) -> str:
        return self.name


@dataclass
class ValidationIssue:
    """One finding from a layout check.

    Attributes:
        severity: WARN or FAIL
        code: Rule code (e.g. "HGT-001")
        message: Human-readable description
        rule_reference: The invariant the rule protects
        remediation: Suggested fix, if the rule has one
        cell: Offending grid cell as (x, z)
        room_index: Offending room, for room-level findings
    """
    severity: Severity
    code: str
    message: str
    rule_reference: str
    remediation: Optional[str] = None
    cell: Optional[Tuple[int, int]] = None
    room_index: Optional[int] = None

    @property
    def location(self) -> Optional[str]:
        if self.cell is not None:
            return f"({self.cell[0]}, {self.cell[1]})"
        if self.room_index is not None:
            return f"room {self.room_index}"
        return None

    @property
    def category(self) -> str:
        """Rule family, the part of the code before the dash"""
        return self.code.split('-', 1)[0]

    def format(self) -> str:
        """[SEVERITY] CODE at=LOCATION :: message :: fix=FIX"""
        return (f"[{self.severity}] {self.code} at={self.location or '-'} :: "
                f"{self.message} :: fix={self.remediation or 'N/A'}")

    def __str__(self) -> str:
        return self.format()


@dataclass
class ValidationResult:
    """Issues from one validation run; passes while no FAIL issue is present"""
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.errors

    @property
    def failed(self) -> bool:
        return bool(self.errors)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.FAIL]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.WARN]

    def codes(self) -> List[str]:
        return [i.code for i in self.issues]

    def by_code(self) -> Dict[str, List[ValidationIssue]]:
        grouped: Dict[str, List[ValidationIssue]] = {}
        for issue in self.issues:
            grouped.setdefault(issue.code, []).append(issue)
        return grouped

    def cells(self) -> List[Tuple[int, int]]:
        """Every grid cell some issue points at, in report order"""
        return [i.cell for i in self.issues if i.cell is not None]

    def add_issue(self, issue: ValidationIssue) -> None:
        self.issues.append(issue)

    def extend(self, issues: Iterable[ValidationIssue]) -> 'ValidationResult':
        self.issues.extend(issues)
        return self

    def merge(self, other: 'ValidationResult') -> 'ValidationResult':
        return self.extend(other.issues)

    def summary(self) -> str:
        """One line, e.g. "FAILED: 3 issue(s) (HGT-001 x2, SPWN-001 x1)" """
        if not self.issues:
            return "PASSED: no issues"
        counts = Counter(self.codes())
        parts = ", ".join(f"{code} x{count}" for code, count in sorted(counts.items()))
        status = "PASSED" if self.passed else "FAILED"
        return f"{status}: {len(self.issues)} issue(s) ({parts})"

    def report(self) -> str:
        """Multi-line report, issues grouped by rule code"""
        if not self.issues:
            return "Validation passed: No issues found"

        lines = [f"Validation {self.summary()}", "-" * 60]
        for code, issues in sorted(self.by_code().items()):
            lines.append(f"\n{code} ({len(issues)}):")
            lines.extend(issue.format() for issue in issues)
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            'passed': self.passed,
            'fail_count': len(self.errors),
            'warn_count': len(self.warnings),
            'codes': dict(Counter(self.codes())),
            'issues': [
                {
                    'severity': str(issue.severity),
                    'code': issue.code,
                    'message': issue.message,
                    'remediation': issue.remediation,
                    'cell': list(issue.cell) if issue.cell is not None else None,
                    'room': issue.room_index,
                }
                for issue in self.issues
            ],
        }
