"""
Layout rule catalogue.

Every rule carries a code, a default severity, the invariant it protects and
message/remediation templates filled from the values a check passes in.
Codes are grouped by prefix:

- GRID: wall field (border, connectivity)
- ROOM: room placement and archetype tags
- HGT: height field
- SPWN: player spawn
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .core import Severity, ValidationIssue


@dataclass(frozen=True)
class ValidationRule:
    code: str
    severity: Severity
    rule_reference: str
    message_template: str
    remediation_template: Optional[str] = None
    description: Optional[str] = None

    @property
    def category(self) -> str:
        return self.code.split('-', 1)[0]

    def issue(self, cell: Optional[Tuple[int, int]] = None, room_index: Optional[int] = None,
              **values) -> ValidationIssue:
        """Build an issue at a cell or room, templates filled from ``values``"""
        remediation = self.remediation_template.format(**values) if self.remediation_template else None
        return ValidationIssue(
            severity=self.severity,
            code=self.code,
            message=self.message_template.format(**values),
            rule_reference=self.rule_reference,
            remediation=remediation,
            cell=cell,
            room_index=room_index,
        )


# =============================================================================
# GRID RULES (GRID)
# =============================================================================

GRID_001 = ValidationRule(
    code="GRID-001",
    severity=Severity.FAIL,
    rule_reference="Border closure: the outermost cell ring is solid",
    message_template="Open border cell at ({x}, {z})",
    remediation_template="Call ArenaGrid.enforce_border() after carving",
    description="Every cell with x or z on the grid edge must be solid"
)

GRID_002 = ValidationRule(
    code="GRID-002",
    severity=Severity.FAIL,
    rule_reference="Connectivity: every room is reachable from the spawn room",
    message_template="Room {room} center ({x}, {z}) is not reachable from the spawn room",
    remediation_template="Carve a corridor from room {room} to its nearest neighbour",
    description="Flood fill from the spawn room center must reach every room center"
)


# =============================================================================
# ROOM RULES (ROOM)
# =============================================================================

ROOM_001 = ValidationRule(
    code="ROOM-001",
    severity=Severity.FAIL,
    rule_reference="Primary-pass rooms keep one cell of clearance from earlier rooms",
    message_template="Room {room} intersects earlier room {other} within padding 1",
    description="Rooms placed by the primary pass never intersect earlier rooms with padding 1"
)

ROOM_002 = ValidationRule(
    code="ROOM-002",
    severity=Severity.FAIL,
    rule_reference="Archetype exclusivity: rooms 1..n-1 each carry one archetype, room 0 none",
    message_template="{details}",
    description="The archetype map has exactly the keys 1..n-1"
)

ROOM_003 = ValidationRule(
    code="ROOM-003",
    severity=Severity.FAIL,
    rule_reference="Fallback-pass rooms never overlap earlier rooms",
    message_template="Fallback room {room} overlaps earlier room {other}",
    description="Rooms placed by the fallback pass never intersect earlier rooms with padding 0"
)


# =============================================================================
# HEIGHT RULES (HGT)
# =============================================================================

HGT_001 = ValidationRule(
    code="HGT-001",
    severity=Severity.FAIL,
    rule_reference="Height smoothness: filled cells sit at most one tier above their lowest filled neighbour",
    message_template="Cell ({x}, {z}) at tier {tier} towers over its neighbours",
    remediation_template="Run relax_heights() on the height field",
    description="No filled cell exceeds its lowest filled orthogonal neighbour by more than one tier"
)


# =============================================================================
# SPAWN RULES (SPWN)
# =============================================================================

SPWN_001 = ValidationRule(
    code="SPWN-001",
    severity=Severity.FAIL,
    rule_reference="Spawn platform: a 3x3 floor-0 block exists at the spawn room center",
    message_template="No floor-0 tile under spawn cell ({x}, {z})",
    remediation_template="Fill the 3x3 spawn block at tier 0",
    description="The player must never spawn over a void"
)


# =============================================================================
# RULE REGISTRY
# =============================================================================

ALL_RULES = {rule.code: rule for rule in (
    GRID_001, GRID_002, ROOM_001, ROOM_002, ROOM_003, HGT_001, SPWN_001,
)}


def get_rule(code: str) -> Optional[ValidationRule]:
    return ALL_RULES.get(code)


def get_rules_by_category(prefix: str) -> List[ValidationRule]:
    """Get all rules with a given prefix (e.g. "GRID", "ROOM")"""
    return [rule for rule in ALL_RULES.values() if rule.category == prefix]
