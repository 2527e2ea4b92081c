"""
Validation of conditional logic attached to form blocks.

A block's logic is a condition tree plus a list of actions:

    {
        "conditions": {
            "operatorIdentifier": "and",
            "children": [
                {"identifier": "email", "value": {
                    "operator": "contains",
                    "property_meta": {"id": "email", "type": "email"},
                    "value": "@example.com"
                }}
            ]
        },
        "actions": ["show-block"]
    }

Groups combine children with "and"/"or"; leaves compare one field with an
operator from the condition mapping. Every defect found while walking the
tree is recorded as a short detail token; all of them are reported.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Any, Union

import regex

from formforge.reference_data import get_condition_mapping
from formforge.type_validator import is_layout_block
from formforge.validation import PropertyValidator, is_numeric, is_truthy_flag


ACTIONS_VALUES = [
    'show-block',
    'hide-block',
    'make-it-optional',
    'require-answer',
    'enable-block',
    'disable-block',
]

GROUP_OPERATORS = ('and', 'or')

LAYOUT_BLOCK_ACTIONS = ('show-block', 'hide-block')
HIDDEN_BLOCK_ACTIONS = ('show-block', 'require-answer')
REQUIRED_BLOCK_ACTIONS = ('make-it-optional', 'hide-block', 'disable-block')
DISABLED_BLOCK_ACTIONS = ('enable-block', 'require-answer', 'make-it-optional')


@dataclass
class Combinator:
    """An and/or group over child conditions."""
    operator: Any
    children: Any


@dataclass
class Leaf:
    """A single comparison on one field."""
    identifier: Any
    body: Any


@dataclass
class Unrecognized:
    """A node that is neither a group nor a comparison; ignored."""
    raw: Any


ConditionNode = Union[Combinator, Leaf, Unrecognized]


def parse_condition_node(node: Dict[str, Any]) -> ConditionNode:
    """Tag a raw condition dict as a group or a comparison."""
    if 'operatorIdentifier' in node:
        return Combinator(node.get('operatorIdentifier'), node.get('children'))
    if node.get('identifier') is not None:
        return Leaf(node['identifier'], node.get('value'))
    return Unrecognized(node)


@dataclass
class LogicCheck:
    """Scratch state for validating one block's logic."""
    property: Dict[str, Any]
    mapping: Dict[str, Any]
    is_condition_correct: bool = True
    is_action_correct: bool = True
    condition_errors: List[str] = field(default_factory=list)

    def condition_error(self, detail: str):
        self.is_condition_correct = False
        self.condition_errors.append(detail)


def value_has_type(expected_type: Any, value: Any) -> bool:
    """Loose JSON type check used for condition values."""
    if expected_type == 'string':
        return isinstance(value, str)
    if expected_type == 'boolean':
        return isinstance(value, bool)
    if expected_type == 'number':
        return is_numeric(value)
    if expected_type == 'object':
        return isinstance(value, (dict, list))
    return True


def _is_valid_regex(pattern: Any) -> bool:
    if not isinstance(pattern, str):
        return False
    try:
        regex.compile(pattern)
    except regex.error:
        return False
    return True


class LogicPropertyValidator(PropertyValidator):
    """
    Checks the logic conditions and actions of a block.

    Both failures collapse into a single ``logic`` message.
    """

    def validate(self, property: Dict[str, Any], index: int,
                 context: Dict[str, Any]) -> Dict[str, str]:
        logic = property.get('logic')

        if not logic or not isinstance(logic, dict):
            return {}

        if logic.get('conditions') is None:
            return {}

        check = LogicCheck(property=property, mapping=get_condition_mapping())
        self._check_conditions(check, logic['conditions'])
        self._check_actions(check, logic.get('actions'))

        if check.is_condition_correct and check.is_action_correct:
            return {}

        name = property.get('name')
        if name is None:
            name = 'Unknown'
        return {'logic': self._build_error_message(check, name)}

    def _check_conditions(self, check: LogicCheck, conditions: Any):
        if isinstance(conditions, list):
            # A bare list carries neither a group nor a comparison
            return
        if not isinstance(conditions, dict):
            check.condition_error('conditions must be an array')
            return

        node = parse_condition_node(conditions)
        if isinstance(node, Combinator):
            self._check_combinator(check, node)
        elif isinstance(node, Leaf):
            self._check_leaf(check, node)

    def _check_combinator(self, check: LogicCheck, node: Combinator):
        if isinstance(node.operator, dict) and 'children' in node.operator:
            check.condition_error('extra condition')
            return

        if node.operator not in GROUP_OPERATORS:
            check.condition_error('missing operator')
            return

        if not isinstance(node.children, list):
            check.condition_error('wrong sub-condition type')
            return

        for child in node.children:
            self._check_conditions(check, child)

    def _check_leaf(self, check: LogicCheck, node: Leaf):
        body = node.body
        if not isinstance(body, dict):
            check.condition_error('missing condition body')
            return

        property_meta = body.get('property_meta')
        if not isinstance(property_meta, dict):
            check.condition_error('missing condition property')
            return

        if property_meta.get('type') is None:
            check.condition_error('missing condition property type')
            return

        if body.get('operator') is None:
            check.condition_error('missing condition operator')
            return

        field_type = property_meta['type']
        operator = body['operator']

        type_config = check.mapping.get(field_type) if isinstance(field_type, str) else None
        if not isinstance(type_config, dict):
            check.condition_error('configuration not found for condition type')
            return

        comparators = type_config.get('comparators') or {}
        if not isinstance(operator, str) or operator not in comparators:
            check.condition_error('configuration not found for condition operator')
            return

        comparator = comparators[operator] or {}
        if not comparator:
            # Operators such as is_checked take no value
            return

        if body.get('value') is None:
            check.condition_error('missing condition value')
            return

        self._check_value(check, comparator, body['value'])

    def _check_value(self, check: LogicCheck, comparator: Dict[str, Any], value: Any):
        expected = comparator.get('expected_type')
        expected_types = expected if isinstance(expected, list) else [expected]

        # The comparator comes from the compared field's type (property_meta),
        # not the type of the block owning the logic. A bad pattern reports
        # only the regex token, without a second value type error.
        fmt = comparator.get('format') or {}
        if 'string' in expected_types and fmt.get('type') == 'regex':
            if not _is_valid_regex(value):
                check.condition_error('invalid regex pattern')
            return

        if not any(value_has_type(t, value) for t in expected_types):
            check.condition_error('wrong type of condition value')

    def _check_actions(self, check: LogicCheck, actions: Any):
        if not isinstance(actions, list) or not actions:
            check.is_action_correct = False
            return

        prop = check.property
        layout = is_layout_block(prop.get('type'))
        hidden = is_truthy_flag(prop.get('hidden', False))
        required = is_truthy_flag(prop.get('required', False))
        disabled = is_truthy_flag(prop.get('disabled', False))

        for action in actions:
            if (
                action not in ACTIONS_VALUES
                or (layout and action not in LAYOUT_BLOCK_ACTIONS)
                or (hidden and action not in HIDDEN_BLOCK_ACTIONS)
                or (required and action not in REQUIRED_BLOCK_ACTIONS)
                or (disabled and action not in DISABLED_BLOCK_ACTIONS)
            ):
                check.is_action_correct = False
                break

    def _build_error_message(self, check: LogicCheck, field_name: Any) -> str:
        message = ''
        if not check.is_condition_correct:
            message = f'The logic conditions for {field_name} are not complete.'
        elif not check.is_action_correct:
            message = f'The logic actions for {field_name} are not valid.'

        if check.condition_errors:
            message += ' Error detail(s): ' + ', '.join(check.condition_errors)

        return message
