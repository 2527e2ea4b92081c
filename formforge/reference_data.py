"""
Static reference data used by the validators.

Both datasets are read from JSON files once per process and reused for
every request. Paths can be overridden with the STRIPE_CURRENCIES_PATH and
CONDITION_MAPPING_PATH config values.
"""

import json
import os
from functools import lru_cache
from typing import Dict, Any, FrozenSet

from flask import current_app, has_app_context


DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data')
STRIPE_CURRENCIES_FILE = 'stripe_currencies.json'
CONDITION_MAPPING_FILE = 'condition_mapping.json'


def _resource_path(config_key: str, filename: str) -> str:
    if has_app_context():
        configured = current_app.config.get(config_key)
        if configured:
            return configured
    return os.path.join(DATA_DIR, filename)


@lru_cache(maxsize=None)
def _load_currency_codes(path: str) -> FrozenSet[str]:
    with open(path, encoding='utf-8') as f:
        currencies = json.load(f)
    return frozenset(currency['code'].upper() for currency in currencies)


@lru_cache(maxsize=None)
def _load_condition_mapping(path: str) -> Dict[str, Any]:
    with open(path, encoding='utf-8') as f:
        return json.load(f)


def get_stripe_currency_codes() -> FrozenSet[str]:
    """Upper-cased currency codes supported by Stripe."""
    return _load_currency_codes(_resource_path('STRIPE_CURRENCIES_PATH', STRIPE_CURRENCIES_FILE))


def get_condition_mapping() -> Dict[str, Any]:
    """
    Operator configuration for logic conditions.

    Shape: mapping[field_type]['comparators'][operator] = {expected_type, format?}.
    An empty comparator means the operator takes no value. Treat as read-only.
    """
    return _load_condition_mapping(_resource_path('CONDITION_MAPPING_PATH', CONDITION_MAPPING_FILE))


def clear_reference_caches():
    """Drop cached reference data (used by tests)."""
    _load_currency_codes.cache_clear()
    _load_condition_mapping.cache_clear()
