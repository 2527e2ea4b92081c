"""
Tests for logic condition and action validation.
"""

import pytest

from formforge.logic_validator import (
    LogicPropertyValidator, Combinator, Leaf, Unrecognized,
    parse_condition_node, value_has_type
)


def leaf(operator='equals', field_type='text', value='hello', **body_overrides):
    body = {
        'operator': operator,
        'property_meta': {'id': 'field_1', 'type': field_type},
        'value': value,
    }
    body.update(body_overrides)
    return {'identifier': 'field_1', 'value': body}


def group(*children, operator='and'):
    return {'operatorIdentifier': operator, 'children': list(children)}


def block(conditions, actions=None, **overrides):
    prop = {
        'id': 'b1',
        'name': 'Favourite colour',
        'type': 'text',
        'logic': {'conditions': conditions, 'actions': actions if actions is not None else ['hide-block']},
    }
    prop.update(overrides)
    return prop


def validate(prop):
    return LogicPropertyValidator().validate(prop, 0, {'properties': [prop], 'workspace': None})


class TestConditionNodes:
    def test_group(self):
        node = parse_condition_node(group(leaf()))
        assert isinstance(node, Combinator)
        assert node.operator == 'and'

    def test_leaf(self):
        node = parse_condition_node(leaf())
        assert isinstance(node, Leaf)
        assert node.identifier == 'field_1'

    def test_unrecognized(self):
        assert isinstance(parse_condition_node({'foo': 'bar'}), Unrecognized)


class TestValueTypes:
    def test_number_accepts_numeric_strings(self):
        assert value_has_type('number', '12.5')
        assert value_has_type('number', 3)
        assert not value_has_type('number', True)
        assert not value_has_type('number', 'abc')

    @pytest.mark.parametrize('value', ['nan', 'inf', '1_000', ''])
    def test_number_rejects_non_numeric_strings(self, value):
        assert not value_has_type('number', value)

    def test_object_accepts_lists(self):
        assert value_has_type('object', ['a'])
        assert not value_has_type('object', 'a')


class TestSkipped:
    @pytest.mark.parametrize('logic', [None, [], {}, 'yes', {'actions': ['hide-block']}])
    def test_no_conditions(self, app, logic):
        assert validate({'id': 'b', 'name': 'B', 'type': 'text', 'logic': logic}) == {}

    def test_bare_list_conditions_ignored(self, app):
        assert validate(block([leaf()])) == {}


class TestConditions:
    def test_valid_tree(self, app):
        conditions = group(
            leaf(),
            group(leaf('greater_than', 'number', 3), leaf('is_checked', 'checkbox', None), operator='or'),
        )
        assert validate(block(conditions)) == {}

    def test_leaf_at_root(self, app):
        assert validate(block(leaf('contains', 'email', '@example.com'))) == {}

    def test_missing_operator(self, app):
        errors = validate(block(group(leaf(), operator='xor')))
        assert errors == {
            'logic': 'The logic conditions for Favourite colour are not complete. '
                     'Error detail(s): missing operator'
        }

    def test_extra_condition(self, app):
        conditions = {'operatorIdentifier': {'children': []}, 'children': []}
        assert validate(block(conditions))['logic'].endswith('Error detail(s): extra condition')

    def test_children_must_be_list(self, app):
        errors = validate(block({'operatorIdentifier': 'and', 'children': 'x'}))
        assert errors['logic'].endswith('wrong sub-condition type')

    def test_non_dict_child(self, app):
        errors = validate(block(group(leaf(), 'oops')))
        assert errors['logic'].endswith('conditions must be an array')

    def test_missing_body(self, app):
        errors = validate(block({'identifier': 'field_1'}))
        assert errors['logic'].endswith('missing condition body')

    def test_missing_property_type(self, app):
        condition = leaf(property_meta={'id': 'field_1'})
        assert validate(block(condition))['logic'].endswith('missing condition property type')

    def test_unknown_type(self, app):
        assert validate(block(leaf(field_type='hologram')))['logic'].endswith(
            'configuration not found for condition type'
        )

    def test_unknown_operator(self, app):
        assert validate(block(leaf(operator='is_blue')))['logic'].endswith(
            'configuration not found for condition operator'
        )

    def test_missing_value(self, app):
        assert validate(block(leaf(value=None)))['logic'].endswith('missing condition value')

    def test_wrong_value_type(self, app):
        errors = validate(block(leaf('greater_than', 'number', 'many')))
        assert errors['logic'].endswith('wrong type of condition value')

    def test_valueless_operator(self, app):
        assert validate(block(leaf('is_empty', 'text', None))) == {}

    def test_invalid_regex(self, app):
        errors = validate(block(leaf('matches_regex', 'text', '[a-z')))
        assert errors['logic'] == (
            'The logic conditions for Favourite colour are not complete. '
            'Error detail(s): invalid regex pattern'
        )

    def test_valid_regex(self, app):
        assert validate(block(leaf('matches_regex', 'text', '^[a-z]+$'))) == {}

    @pytest.mark.parametrize('pattern', [r'\p{L}+', r'(?<year>\d{4})', r'^\w+@\w+\.com$'])
    def test_unicode_class_and_named_group_patterns_accepted(self, app, pattern):
        assert validate(block(leaf('does_not_match_regex', 'text', pattern))) == {}

    def test_every_defect_reported(self, app):
        conditions = group(leaf(value=None), leaf(operator='is_blue'))
        errors = validate(block(conditions))
        assert errors['logic'].endswith(
            'Error detail(s): missing condition value, configuration not found for condition operator'
        )

    def test_unknown_name(self, app):
        prop = block(group(leaf(), operator=None))
        del prop['name']
        assert validate(prop)['logic'].startswith('The logic conditions for Unknown are not complete.')


class TestActions:
    def test_missing_actions(self, app):
        errors = validate(block(leaf(), actions=[]))
        assert errors == {'logic': 'The logic actions for Favourite colour are not valid.'}

    def test_unknown_action(self, app):
        assert 'logic' in validate(block(leaf(), actions=['explode']))

    def test_layout_block_only_shows_or_hides(self, app):
        assert validate(block(leaf(), actions=['hide-block'], type='nf-text')) == {}
        assert 'logic' in validate(block(leaf(), actions=['require-answer'], type='nf-text'))

    def test_hidden_block(self, app):
        assert validate(block(leaf(), actions=['show-block'], hidden=True)) == {}
        assert 'logic' in validate(block(leaf(), actions=['hide-block'], hidden=True))

    def test_required_block(self, app):
        assert validate(block(leaf(), actions=['make-it-optional'], required='1')) == {}
        assert 'logic' in validate(block(leaf(), actions=['require-answer'], required=True))

    def test_required_flag_zero_string_is_off(self, app):
        assert validate(block(leaf(), actions=['require-answer'], required='0')) == {}

    def test_disabled_block(self, app):
        assert validate(block(leaf(), actions=['enable-block'], disabled=True)) == {}
        assert 'logic' in validate(block(leaf(), actions=['disable-block'], disabled=True))

    def test_condition_message_takes_precedence(self, app):
        errors = validate(block(group(leaf(), operator='nope'), actions=[]))
        assert errors['logic'].startswith('The logic conditions for Favourite colour are not complete.')
