"""
Type-specific validation of form blocks.

Only the fields declared for a block's type are checked; anything else a
block carries is left alone so new optional settings never break a save.
"""

from typing import Dict, Any, Optional

from formforge.validation import (
    PropertyValidator, is_set, is_boolean_like, is_integer_like, is_numeric, to_number
)


LAYOUT_BLOCK_PREFIX = 'nf-'

_SELECT_RULES = {
    'allow_creation': {'type': 'boolean'},
    'without_dropdown': {'type': 'boolean'},
    'min_selection': {'type': 'integer', 'min': 0},
    'max_selection': {'type': 'integer', 'min': 1},
}

# Key = block type, value = field => rule config
TYPE_RULES = {
    'text': {
        'multi_lines': {'type': 'boolean'},
        'max_char_limit': {'type': 'integer', 'min': 1},
        'show_char_limit': {'type': 'boolean'},
        'secret_input': {'type': 'boolean'},
        'generates_uuid': {'type': 'boolean'},
        'generates_auto_increment_id': {'type': 'boolean'},
    },
    'date': {
        'with_time': {'type': 'boolean'},
        'date_range': {'type': 'boolean'},
        'prefill_today': {'type': 'boolean'},
        'disable_past_dates': {'type': 'boolean'},
        'disable_future_dates': {'type': 'boolean'},
    },
    'select': dict(_SELECT_RULES),
    'multi_select': dict(_SELECT_RULES),
    'files': {
        'max_file_size': {'type': 'numeric', 'min': 1},
        'allowed_file_types': {'type': 'nullable'},
    },
    'checkbox': {
        'use_toggle_switch': {'type': 'boolean'},
    },
}

# Fields that can appear on any input block (not layout blocks)
COMMON_INPUT_RULES = {
    'generates_uuid': {'type': 'boolean'},
    'generates_auto_increment_id': {'type': 'boolean'},
}


def is_layout_block(block_type: Any) -> bool:
    return isinstance(block_type, str) and block_type.startswith(LAYOUT_BLOCK_PREFIX)


def _format_bound(bound) -> str:
    if isinstance(bound, float) and bound.is_integer():
        return str(int(bound))
    return str(bound)


def validate_field(field_name: str, value: Any, config: Dict[str, Any]) -> Optional[str]:
    """
    Validate a single field against its rule config.

    Returns:
        The error message, or None when the value is acceptable
    """
    kind = config.get('type')
    minimum = config.get('min')
    maximum = config.get('max')

    if kind == 'boolean':
        if not is_boolean_like(value):
            return f'The {field_name} field must be a boolean.'

    elif kind == 'integer':
        if not is_integer_like(value):
            return f'The {field_name} field must be an integer.'
        if minimum is not None and int(value) < minimum:
            return f'The {field_name} field must be at least {_format_bound(minimum)}.'
        if maximum is not None and int(value) > maximum:
            return f'The {field_name} field must not be greater than {_format_bound(maximum)}.'

    elif kind == 'numeric':
        if not is_numeric(value):
            return f'The {field_name} field must be a number.'
        if minimum is not None and to_number(value) < minimum:
            return f'The {field_name} field must be at least {_format_bound(minimum)}.'
        if maximum is not None and to_number(value) > maximum:
            return f'The {field_name} field must not be greater than {_format_bound(maximum)}.'

    # 'nullable' accepts anything
    return None


class TypePropertyValidator(PropertyValidator):
    """Validates the fields declared for the block's type."""

    def validate(self, property: Dict[str, Any], index: int,
                 context: Dict[str, Any]) -> Dict[str, str]:
        errors = {}
        block_type = property.get('type')

        # Missing type is reported by CorePropertyValidator
        if not block_type:
            return errors

        if is_layout_block(block_type):
            return errors

        rules = dict(TYPE_RULES.get(block_type, {})) if isinstance(block_type, str) else {}
        rules.update(COMMON_INPUT_RULES)

        for field_name, config in rules.items():
            if not is_set(property, field_name):
                continue
            message = validate_field(field_name, property[field_name], config)
            if message is not None:
                errors[field_name] = message

        return errors
