"""
Tests for the form properties rule that runs every validator.
"""

import copy

from formforge.properties_rule import (
    FormPropertiesRule, validate_form_properties, GENERIC_FAILURE_MESSAGE
)
from formforge.validation import ValidationResult


VALID_FORM = [
    {'id': 'name', 'name': 'Name', 'type': 'text', 'required': True},
    {'id': 'title', 'name': 'Title', 'type': 'nf-text'},
    {
        'id': 'colour',
        'name': 'Colour',
        'type': 'select',
        'logic': {
            'conditions': {
                'operatorIdentifier': 'and',
                'children': [{
                    'identifier': 'name',
                    'value': {
                        'operator': 'is_not_empty',
                        'property_meta': {'id': 'name', 'type': 'text'},
                    },
                }],
            },
            'actions': ['show-block'],
        },
        'hidden': True,
    },
]


class TestFormPropertiesRule:
    def test_valid_form(self, app):
        result = validate_form_properties(copy.deepcopy(VALID_FORM))
        assert result.is_valid
        assert result.errors == []

    def test_not_a_list(self, app):
        result = validate_form_properties({'id': 'x'})
        assert result.messages() == {'properties': ['Properties must be an array.']}

    def test_non_dict_entry(self, app):
        result = validate_form_properties([VALID_FORM[0], 'text'])
        assert result.messages() == {
            'properties.1': ['Property at index 1 must be an array.'],
            'properties': [GENERIC_FAILURE_MESSAGE],
        }

    def test_errors_keyed_by_index_and_field(self, app):
        properties = [
            VALID_FORM[0],
            {'id': 'b', 'type': 'text', 'max_char_limit': 0, 'width': 'wide'},
        ]
        messages = validate_form_properties(properties).messages()
        assert messages['properties.1.name'] == ['The form block number 2 is missing a name.']
        assert messages['properties.1.width'] == ['The width must be one of: full, 1/2, 1/3, 2/3, 3/4, 1/4']
        assert messages['properties.1.max_char_limit'] == ['The max_char_limit field must be at least 1.']
        assert messages['properties'] == [GENERIC_FAILURE_MESSAGE]

    def test_core_and_type_errors_on_same_field_both_kept(self, app):
        properties = [{'id': 'c', 'name': 'Agree', 'type': 'checkbox', 'use_toggle_switch': 'on'}]
        messages = validate_form_properties(properties).messages()
        assert messages['properties.0.use_toggle_switch'] == [
            'The use_toggle_switch field must be a boolean.',
            'The use_toggle_switch field must be a boolean.',
        ]

    def test_errors_from_every_block_collected(self, app):
        properties = [{}, {}, {}]
        messages = validate_form_properties(properties).messages()
        for index in range(3):
            assert f'properties.{index}.id' in messages

    def test_rule_is_idempotent(self, app):
        properties = [
            {'id': 'a', 'name': 'A', 'type': 'payment', 'amount': 0, 'currency': 'usd'},
            {'id': 'b', 'name': 'B', 'type': 'text', 'logic': {'conditions': 'nope', 'actions': []}},
        ]
        rule = FormPropertiesRule()
        assert rule.collect_errors(properties) == rule.collect_errors(properties)

    def test_input_not_mutated(self, app):
        properties = copy.deepcopy(VALID_FORM) + [{'type': 'text'}]
        snapshot = copy.deepcopy(properties)
        validate_form_properties(properties)
        assert properties == snapshot

    def test_fail_called_once(self, app):
        failures = []
        result = ValidationResult()
        rule = FormPropertiesRule().set_validator(result)
        rule.validate('properties', [{}, {}], failures.append)
        assert failures == [GENERIC_FAILURE_MESSAGE]
        assert len(result.errors) == 6

    def test_custom_validators(self, app):
        class AlwaysFails:
            def validate(self, prop, index, context):
                return {'custom': f'bad {index}'}

        rule = FormPropertiesRule(validators=[AlwaysFails()])
        assert rule.collect_errors([{}, {}]) == {
            'properties.0.custom': ['bad 0'],
            'properties.1.custom': ['bad 1'],
        }

    def test_payment_validated_with_workspace(self, workspace, stripe_provider):
        properties = [{
            'id': 'pay', 'name': 'Pay', 'type': 'payment',
            'amount': 20, 'currency': 'EUR', 'stripe_account_id': stripe_provider.id,
        }]
        assert validate_form_properties(properties, workspace=workspace).is_valid

    def test_fail_called_without_error_bag(self, app):
        failures = []
        FormPropertiesRule().validate('properties', [{}], failures.append)
        assert failures == [GENERIC_FAILURE_MESSAGE]

    def test_no_failure_without_errors(self, app):
        failures = []
        FormPropertiesRule().validate('properties', copy.deepcopy(VALID_FORM), failures.append)
        assert failures == []

    def test_every_payment_block_reports_duplicate(self, app):
        properties = [
            {'id': 'pay1', 'name': 'Deposit', 'type': 'payment', 'amount': 10, 'currency': 'usd'},
            {'id': 'name', 'name': 'Name', 'type': 'text'},
            {'id': 'pay2', 'name': 'Balance', 'type': 'payment', 'amount': 20, 'currency': 'usd'},
        ]
        messages = validate_form_properties(properties).messages()
        assert messages['properties.0.type'] == ['Only one payment block allowed']
        assert messages['properties.2.type'] == ['Only one payment block allowed']
        assert 'properties.1.type' not in messages

    def test_accepted_properties_accepted_again(self, workspace, stripe_provider):
        properties = copy.deepcopy(VALID_FORM) + [{
            'id': 'pay', 'name': 'Pay', 'type': 'payment',
            'amount': 15, 'currency': 'gbp', 'stripe_account_id': stripe_provider.id,
        }]

        first = validate_form_properties(properties, workspace=workspace)
        assert first.is_valid

        second = validate_form_properties(properties, workspace=workspace)
        assert second.is_valid
        assert second.errors == []
