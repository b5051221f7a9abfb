"""
Validation package for generated arena layouts.

Public API:
    - ValidationResult, ValidationIssue, Severity: Core result types
    - ValidationRule, ALL_RULES, get_rule: Rule registry
    - validate_layout(): Run every layout check against a build
"""

from .core import Severity, ValidationIssue, ValidationResult
from .rules import ValidationRule, ALL_RULES, get_rule, get_rules_by_category
from .checks.layout_checks import validate_layout

__all__ = [
    'Severity',
    'ValidationIssue',
    'ValidationResult',
    'ValidationRule',
    'ALL_RULES',
    'get_rule',
    'get_rules_by_category',
    'validate_layout',
]
