"""
Flask routes for FormForge.

- Saving a form's block list (validated as a whole)
- Answering a form, or editing an earlier answer
- Fetching a submission by its public identifier
- Resolving the amount of a payment block
"""

from flask import Blueprint, request, jsonify, current_app, abort

from formforge import db
from formforge.audit_logger import log_properties_validation, log_submission_saved
from formforge.mention_parser import resolve_payment_amount
from formforge.models import Form, FormSubmission
from formforge.properties_rule import validate_form_properties
from formforge.security import rate_limit
from formforge.submission_identifiers import (
    get_submission_identifier, resolve_answer_submission, resolve_submission
)


api_bp = Blueprint('api', __name__, url_prefix='/api')

NO_PAYMENT_BLOCK_MESSAGE = (
    'Form does not have a payment block. '
    'If you just added a payment block, please save the form and try again.'
)
INVALID_AMOUNT_MESSAGE = 'Invalid payment amount. Please ensure the amount field has a valid value.'


def get_form_or_404(slug: str) -> Form:
    return Form.query.filter_by(slug=slug).first_or_404(description='Form not found.')


def get_public_form_or_404(slug: str) -> Form:
    """Forms that are closed or private are invisible to respondents."""
    form = get_form_or_404(slug)
    if not form.is_public:
        abort(404, description='Form not found.')
    return form


@api_bp.route('/forms/<slug>/properties', methods=['PUT'])
@rate_limit('save_properties')
def api_save_properties(slug):
    """
    Validate and save the block list of a form.

    Returns:
        200 when saved, 422 with every field error otherwise
    """
    form = get_form_or_404(slug)
    payload = request.get_json(silent=True) or {}
    properties = payload.get('properties')

    result = validate_form_properties(properties, workspace=form.workspace)

    if not result.is_valid:
        log_properties_validation(form.id, form.workspace_id, passed=False,
                                  error_count=len(result.errors))
        current_app.logger.info(
            f'Rejected properties of form {form.id}: {len(result.errors)} error(s)'
        )
        response = result.to_dict()
        response['message'] = result.first('properties')
        return jsonify(response), 422

    form.properties = properties
    db.session.commit()
    log_properties_validation(form.id, form.workspace_id, passed=True)

    return jsonify({'ok': True, 'message': 'Form updated.'}), 200


@api_bp.route('/forms/<slug>/answer', methods=['POST'])
@rate_limit('answer')
def api_answer(slug):
    """
    Store an answer to a form.

    A ``submission_id`` (UUID, or Hashid for legacy rows) in the payload
    edits that submission instead of creating one.
    """
    form = get_public_form_or_404(slug)
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({'ok': False, 'message': 'No JSON payload provided'}), 400

    if (payload.get('submission_id') or payload.get('submission_hash')) and not form.editable_submissions:
        abort(403, description='You are not allowed to edit submissions of this form.')

    data, submission = resolve_answer_submission(form, payload)
    data.pop('submission_id', None)

    created = submission is None
    if created:
        submission = FormSubmission.create(form, data)
        db.session.add(submission)
    else:
        submission.data = data
    db.session.commit()

    log_submission_saved(submission.id, form.id, created=created)

    return jsonify({
        'ok': True,
        'message': 'Form submission saved.',
        'submission_id': get_submission_identifier(submission),
    }), 201 if created else 200


@api_bp.route('/forms/<slug>/submissions/<submission_id>', methods=['GET'])
@rate_limit('fetch_submission')
def api_fetch_submission(slug, submission_id):
    """Return a submission so a respondent can edit it."""
    form = get_public_form_or_404(slug)
    if not form.editable_submissions:
        abort(403, description='You are not allowed to edit submissions of this form.')

    submission = resolve_submission(form, submission_id)

    return jsonify({
        'ok': True,
        'submission_id': get_submission_identifier(submission),
        'data': submission.to_dict(publicly_accessed=True)['data'],
    }), 200


@api_bp.route('/forms/<slug>/payment-amount', methods=['POST'])
@rate_limit('payment_amount')
def api_payment_amount(slug):
    """Resolve the amount to charge from the submitted answers."""
    form = get_public_form_or_404(slug)

    payment_block = form.payment_block()
    if payment_block is None:
        return jsonify({'ok': False, 'message': NO_PAYMENT_BLOCK_MESSAGE}), 400

    payload = request.get_json(silent=True) or {}
    submission_data = payload.get('submission_data')
    if not isinstance(submission_data, dict):
        submission_data = {}

    amount = resolve_payment_amount(payment_block.get('amount'), submission_data)
    if amount is None:
        current_app.logger.warning(f'Unresolvable payment amount on form {form.id}')
        return jsonify({'ok': False, 'message': INVALID_AMOUNT_MESSAGE}), 400

    return jsonify({
        'ok': True,
        'amount': amount,
        'currency': payment_block.get('currency'),
    }), 200
