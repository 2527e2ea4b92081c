"""
Single-pass validation of a form's block list.

Every block is visited once and handed to each property validator in a
fixed order. Errors are keyed ``properties.<index>.<field>`` so they line up
with the submitted payload.
"""

from typing import Callable, Dict, List, Any, Optional

from formforge.core_validator import CorePropertyValidator
from formforge.logic_validator import LogicPropertyValidator
from formforge.payment_validator import PaymentPropertyValidator
from formforge.type_validator import TypePropertyValidator
from formforge.validation import PropertyValidator, ValidationResult


GENERIC_FAILURE_MESSAGE = 'One or more properties have validation errors.'


class FormPropertiesRule:
    """
    Validation rule for the ``properties`` attribute of a form.

    The caller's error bag is attached with ``set_validator``; all field
    errors go there, and ``fail`` is called once with a generic message.
    """

    def __init__(self, workspace=None, validators: Optional[List[PropertyValidator]] = None):
        self.workspace = workspace
        self.validator: Optional[ValidationResult] = None

        # Order of execution
        self.validators = validators if validators is not None else [
            CorePropertyValidator(),
            TypePropertyValidator(),
            PaymentPropertyValidator(workspace),
            LogicPropertyValidator(),
        ]

    def set_validator(self, validator: ValidationResult) -> 'FormPropertiesRule':
        self.validator = validator
        return self

    def collect_errors(self, value: List[Any]) -> Dict[str, List[str]]:
        """Run every validator on every block and gather messages per key."""
        all_errors = {}
        context = {
            'properties': value,
            'workspace': self.workspace,
        }

        for index, prop in enumerate(value):
            if not isinstance(prop, dict):
                all_errors[f'properties.{index}'] = [f'Property at index {index} must be an array.']
                continue

            for validator in self.validators:
                for field_name, message in validator.validate(prop, index, context).items():
                    all_errors.setdefault(f'properties.{index}.{field_name}', []).append(message)

        return all_errors

    def validate(self, attribute: str, value: Any, fail: Callable[[str], None]):
        if not isinstance(value, list):
            fail('Properties must be an array.')
            return

        all_errors = self.collect_errors(value)

        if not all_errors:
            return

        if self.validator is not None:
            for error_key, messages in all_errors.items():
                for message in messages:
                    self.validator.add_error(error_key, message)
        fail(GENERIC_FAILURE_MESSAGE)


def validate_form_properties(properties: Any, workspace=None,
                             attribute: str = 'properties') -> ValidationResult:
    """
    Validate a block list and return the populated error bag.

    The generic failure is recorded under the attribute name itself, next to
    the per-field errors.
    """
    result = ValidationResult()
    rule = FormPropertiesRule(workspace).set_validator(result)
    rule.validate(attribute, properties, lambda message: result.add_error(attribute, message))
    return result
