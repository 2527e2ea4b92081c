"""
Payment block validation.

Checks run in order and stop at the first failure, so a misconfigured
payment block reports one problem at a time.
"""

from typing import Dict, Any, Optional

from flask import current_app, has_app_context

from formforge import db
from formforge.mention_parser import contains_mention
from formforge.models import OAuthProvider
from formforge.reference_data import get_stripe_currency_codes
from formforge.validation import PropertyValidator, is_numeric, to_number


PAYMENT_BLOCK_TYPE = 'payment'
MIN_AMOUNT = 1


def count_payment_blocks(properties) -> int:
    return sum(
        1 for prop in properties or []
        if isinstance(prop, dict) and prop.get('type') == PAYMENT_BLOCK_TYPE
    )


def is_valid_amount(amount: Any) -> bool:
    """A fixed amount of at least 1, or a field reference resolved on payment."""
    if is_numeric(amount):
        return to_number(amount) >= MIN_AMOUNT
    return contains_mention(amount)


class PaymentPropertyValidator(PropertyValidator):
    """
    Validates payment blocks against the workspace's connected Stripe accounts.

    Args:
        workspace: Workspace owning the form; association is only checked when given
        self_hosted: Overrides the SELF_HOSTED config value
    """

    def __init__(self, workspace=None, self_hosted: Optional[bool] = None):
        self.workspace = workspace
        self.self_hosted = self_hosted

    def _is_self_hosted(self) -> bool:
        if self.self_hosted is not None:
            return self.self_hosted
        if has_app_context():
            return bool(current_app.config.get('SELF_HOSTED', False))
        return False

    def validate(self, property: Dict[str, Any], index: int,
                 context: Dict[str, Any]) -> Dict[str, str]:
        if property.get('type') != PAYMENT_BLOCK_TYPE:
            return {}

        if self._is_self_hosted():
            return {'type': 'Payment block is not allowed on self hosted. Please use our hosted version.'}

        if count_payment_blocks(context.get('properties')) > 1:
            return {'type': 'Only one payment block allowed'}

        if not is_valid_amount(property.get('amount')):
            return {'amount': 'Amount must be a number of at least 1 or a field reference'}

        currency = property.get('currency')
        if not isinstance(currency, str) or currency.upper() not in get_stripe_currency_codes():
            return {'currency': 'Currency must be a valid currency'}

        stripe_account_id = property.get('stripe_account_id')
        if not stripe_account_id:
            return {'stripe_account_id': 'Stripe account is required'}

        message = self._validate_stripe_account(stripe_account_id)
        if message:
            return {'stripe_account_id': message}

        return {}

    def _validate_stripe_account(self, stripe_account_id: Any) -> Optional[str]:
        try:
            provider = db.session.get(OAuthProvider, stripe_account_id)
            if provider is None:
                return 'Failed to validate Stripe account'

            if self.workspace is not None and not self.workspace.has_provider(provider.id):
                current_app.logger.error(
                    f'Attempted to use Stripe account not associated with the workspace: '
                    f'stripe_account_id={stripe_account_id} provider_id={provider.id} '
                    f'workspace_id={self.workspace.id}'
                )
                return 'The configured Stripe account is not associated with this workspace'

        except Exception as e:
            current_app.logger.error(
                f'Failed to validate Stripe account: account_id={stripe_account_id} error={str(e)}'
            )
            return 'Failed to validate Stripe account'

        return None
