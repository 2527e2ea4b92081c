"""
Validation primitives shared by the form property validators.

Validation Rules Documentation:
===============================

1. CORE (every block)
   - id, name, type: required, non-empty
   - hidden, required, multiple, use_toggle_switch: boolean-like if set
   - help_position, width, align: strict enum if set
   - image: url, alt (max 125 chars), layout enum, focal point 0-100,
     brightness integer -100..100

2. TYPE (input blocks only, layout blocks prefixed "nf-" are skipped)
   - Per-type table of boolean / integer / numeric / nullable fields
   - generates_uuid, generates_auto_increment_id: boolean-like if set

3. PAYMENT (type == "payment")
   - Not available on self hosted installs
   - One payment block per form
   - Amount >= 1 or a field reference (mention)
   - Currency in the Stripe currency list
   - Stripe account exists and belongs to the workspace

4. LOGIC (blocks with logic.conditions)
   - Condition tree of and/or groups over leaf comparisons
   - Operators and value types checked against the condition mapping
   - Actions checked against the block state (hidden/required/disabled)

Boolean-like values are True, False, 0, 1, "0" and "1". Comparisons are
strict: 1.0, "true" or "yes" are not boolean-like.
"""

import re
from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field
from urllib.parse import urlparse


@dataclass
class ValidationError:
    """Represents a single validation error with precise field path."""
    field: str
    message: str
    code: str = 'invalid'


@dataclass
class ValidationResult:
    """Error bag collecting field-level errors for one request."""
    errors: List[ValidationError] = field(default_factory=list)
    is_valid: bool = True

    def add_error(self, field: str, message: str, code: str = 'invalid'):
        """Add a validation error."""
        self.errors.append(ValidationError(field, message, code))
        self.is_valid = False

    def has(self, field: str) -> bool:
        """Check whether any error was recorded for a field path."""
        return any(e.field == field for e in self.errors)

    def messages(self) -> Dict[str, List[str]]:
        """Group messages by field path, preserving insertion order."""
        grouped = {}
        for error in self.errors:
            grouped.setdefault(error.field, []).append(error.message)
        return grouped

    def first(self, field: str) -> Optional[str]:
        for error in self.errors:
            if error.field == field:
                return error.message
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response."""
        return {
            'ok': self.is_valid,
            'errors': self.messages(),
        }


class PropertyValidator:
    """
    Contract for the validators run on every form block.

    ``validate`` receives one property dict, its position in the form and a
    shared context (``properties``: the whole list, ``workspace``: the owning
    workspace or None). It returns a ``{field: message}`` dict, empty when
    the property passes.
    """

    def validate(self, property: Dict[str, Any], index: int,
                 context: Dict[str, Any]) -> Dict[str, str]:
        raise NotImplementedError


INTEGER_PATTERN = re.compile(r'^-?\d+$')
NUMERIC_PATTERN = re.compile(r'^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$')


def is_set(container: Dict[str, Any], key: str) -> bool:
    """True when the key exists and holds a non-null value."""
    return isinstance(container, dict) and container.get(key) is not None


def is_blank(value: Any) -> bool:
    return value is None or value == ''


def is_boolean_like(value: Any) -> bool:
    """Check if a value is boolean or can be interpreted as boolean."""
    if isinstance(value, bool):
        return True
    if type(value) is int:
        return value in (0, 1)
    if isinstance(value, str):
        return value in ('0', '1')
    return False


def is_truthy_flag(value: Any) -> bool:
    """Interpret a block state flag (hidden, required, disabled)."""
    if isinstance(value, str):
        return value not in ('', '0')
    return bool(value)


def is_integer_like(value: Any) -> bool:
    """Check if a value is an integer or an integer string."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, str) and INTEGER_PATTERN.match(value) is not None


def is_numeric(value: Any) -> bool:
    """Check if a value is a number or a numeric string."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    return isinstance(value, str) and NUMERIC_PATTERN.match(value) is not None


def to_number(value: Any) -> float:
    """Convert a value accepted by ``is_numeric`` to float."""
    return float(value)


def is_valid_url(value: Any) -> bool:
    """A valid URL has both a scheme and a network location."""
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc)
