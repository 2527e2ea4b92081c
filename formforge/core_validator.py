"""
Validation of the fields shared by every form block, whatever its type.
"""

from typing import Dict, Any

from formforge.validation import (
    PropertyValidator, is_set, is_blank, is_boolean_like, is_integer_like,
    is_numeric, to_number, is_valid_url
)


VALID_HELP_POSITIONS = ['below_input', 'above_input']
VALID_WIDTHS = ['full', '1/2', '1/3', '2/3', '3/4', '1/4']
VALID_ALIGNS = ['left', 'center', 'right', 'justify']
VALID_IMAGE_LAYOUTS = ['between', 'left-small', 'right-small', 'left-split', 'right-split', 'background']

BOOLEAN_FIELDS = ['hidden', 'required', 'multiple', 'use_toggle_switch']

MAX_ALT_LENGTH = 125
MIN_BRIGHTNESS = -100
MAX_BRIGHTNESS = 100


def _in_enum(value: Any, allowed) -> bool:
    return isinstance(value, str) and value in allowed


class CorePropertyValidator(PropertyValidator):
    """Checks id/name/type presence, flags, layout enums and the image block."""

    def validate(self, property: Dict[str, Any], index: int,
                 context: Dict[str, Any]) -> Dict[str, str]:
        errors = {}
        position = index + 1  # 1-based for user-facing messages

        if is_blank(property.get('id')):
            errors['id'] = f'The form block number {position} is missing an id.'
        if is_blank(property.get('name')):
            errors['name'] = f'The form block number {position} is missing a name.'
        if is_blank(property.get('type')):
            errors['type'] = f'The form block number {position} is missing a type.'

        for field_name in BOOLEAN_FIELDS:
            if is_set(property, field_name) and not is_boolean_like(property[field_name]):
                errors[field_name] = f'The {field_name} field must be a boolean.'

        enums = (
            ('help_position', VALID_HELP_POSITIONS),
            ('width', VALID_WIDTHS),
            ('align', VALID_ALIGNS),
        )
        for field_name, allowed in enums:
            if is_set(property, field_name) and not _in_enum(property[field_name], allowed):
                errors[field_name] = f'The {field_name} must be one of: {", ".join(allowed)}'

        image = property.get('image')
        if isinstance(image, dict):
            errors.update(self._validate_image(image))

        return errors

    def _validate_image(self, image: Dict[str, Any]) -> Dict[str, str]:
        errors = {}

        if is_set(image, 'url') and not is_valid_url(image['url']):
            errors['image.url'] = 'The image URL must be a valid URL.'

        if is_set(image, 'alt'):
            alt = image['alt']
            if not isinstance(alt, str) or len(alt) > MAX_ALT_LENGTH:
                errors['image.alt'] = f'The image alt text must be a string with max {MAX_ALT_LENGTH} characters.'

        if is_set(image, 'layout') and not _in_enum(image['layout'], VALID_IMAGE_LAYOUTS):
            errors['image.layout'] = f'The image layout must be one of: {", ".join(VALID_IMAGE_LAYOUTS)}'

        focal_point = image.get('focal_point')
        if isinstance(focal_point, dict):
            for axis in ('x', 'y'):
                if not is_set(focal_point, axis):
                    continue
                value = focal_point[axis]
                if not is_numeric(value) or not 0 <= to_number(value) <= 100:
                    errors[f'image.focal_point.{axis}'] = f'The focal point {axis} must be a number between 0 and 100.'

        if is_set(image, 'brightness'):
            brightness = image['brightness']
            whole_float = isinstance(brightness, float) and brightness.is_integer()
            if not is_integer_like(brightness) and not whole_float:
                errors['image.brightness'] = 'The image brightness must be an integer.'
            elif not MIN_BRIGHTNESS <= int(brightness) <= MAX_BRIGHTNESS:
                errors['image.brightness'] = f'The image brightness must be between {MIN_BRIGHTNESS} and {MAX_BRIGHTNESS}.'

        return errors
