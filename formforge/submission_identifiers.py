"""
Public identifiers for form submissions.

Submissions are addressed either by their UUID (``public_id``) or, for rows
created before UUIDs existed, by a Hashid of the numeric primary key.

Migration is one-way: once a submission has a UUID, its Hashid no longer
resolves. Looking it up that way answers 404 exactly like an unknown id.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, Optional, Tuple, Union

from flask import current_app, has_app_context
from hashids import Hashids
from werkzeug.exceptions import NotFound

from formforge.audit_logger import log_legacy_identifier_rejected
from formforge.models import Form, FormSubmission


UUID_PATTERN = re.compile(
    r'^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$'
)

DEFAULT_HASHIDS_SALT = ''
DEFAULT_HASHIDS_MIN_LENGTH = 0


class SubmissionNotFound(NotFound):
    description = 'Submission not found.'


class IdentifierKind(Enum):
    UUID = 'uuid'
    LEGACY_HASH = 'legacy_hash'


@dataclass(frozen=True)
class SubmissionIdentifier:
    """A parsed identifier: a UUID string, or the id decoded from a Hashid."""
    kind: IdentifierKind
    value: Union[str, int]

    @property
    def is_uuid(self) -> bool:
        return self.kind is IdentifierKind.UUID


def is_uuid(value: Any) -> bool:
    return isinstance(value, str) and UUID_PATTERN.match(value) is not None


def get_hashids() -> Hashids:
    """Hashids codec configured from HASHIDS_SALT / HASHIDS_MIN_LENGTH."""
    salt = DEFAULT_HASHIDS_SALT
    min_length = DEFAULT_HASHIDS_MIN_LENGTH
    if has_app_context():
        salt = current_app.config.get('HASHIDS_SALT', salt)
        min_length = int(current_app.config.get('HASHIDS_MIN_LENGTH', min_length))
    return Hashids(salt=salt, min_length=min_length)


def encode_legacy_id(submission_id: int) -> str:
    return get_hashids().encode(submission_id)


def decode_legacy_id(identifier: str) -> Optional[int]:
    """Decode a Hashid to a positive numeric id, or None."""
    decoded = get_hashids().decode(identifier)
    if not decoded or not decoded[0]:
        return None
    return int(decoded[0])


def parse_identifier(raw: Any) -> Optional[SubmissionIdentifier]:
    """
    Classify a caller supplied identifier.

    Returns:
        The tagged identifier, or None when it is neither a UUID nor a Hashid
    """
    if raw is None:
        return None
    raw = str(raw).strip()
    if not raw:
        return None

    if is_uuid(raw):
        return SubmissionIdentifier(IdentifierKind.UUID, raw)

    decoded = decode_legacy_id(raw)
    if decoded is None:
        return None
    return SubmissionIdentifier(IdentifierKind.LEGACY_HASH, decoded)


def get_submission_identifier(submission: FormSubmission) -> str:
    """UUID if the submission has one, otherwise its Hashid."""
    return submission.public_id or encode_legacy_id(submission.id)


def get_submission_identifier_by_id(form: Form, submission_id: int) -> str:
    submission = form.submissions.filter_by(id=submission_id).first()
    if submission is None:
        # Should not happen in normal flow
        return encode_legacy_id(submission_id)
    return get_submission_identifier(submission)


def build_edit_url(form: Form, submission: Union[FormSubmission, int], base_url: Optional[str] = None) -> str:
    """Share URL of the form pre-loaded with an existing submission."""
    if base_url is None:
        base_url = current_app.config.get('APP_URL', '')

    if isinstance(submission, FormSubmission):
        identifier = get_submission_identifier(submission)
    else:
        identifier = get_submission_identifier_by_id(form, submission)

    return f'{form.share_url(base_url)}?submission_id={identifier}'


def resolve_submission(form: Form, raw_identifier: Any) -> FormSubmission:
    """
    Find a submission of ``form`` from a public identifier.

    UUIDs are looked up by public_id only. Anything else is decoded as a
    Hashid; a submission found that way must not have a public_id.

    Raises:
        SubmissionNotFound: when nothing acceptable matches
    """
    identifier = parse_identifier(raw_identifier)
    if identifier is None:
        raise SubmissionNotFound()

    if identifier.is_uuid:
        submission = form.submissions.filter_by(public_id=identifier.value).first()
        if submission is None:
            raise SubmissionNotFound()
        return submission

    submission = form.submissions.filter_by(id=identifier.value).first()
    if submission is None:
        raise SubmissionNotFound()

    if submission.public_id:
        current_app.logger.warning(
            f'Rejected legacy identifier for submission {submission.id} of form {form.id}'
        )
        log_legacy_identifier_rejected(form.id, submission.id)
        raise SubmissionNotFound()

    return submission


def resolve_answer_submission(form: Form, submission_data: Dict[str, Any],
                              raw_identifier: Any = None) -> Tuple[Dict[str, Any], Optional[FormSubmission]]:
    """
    Resolve the submission an answer is editing, if any.

    The identifier is taken from ``raw_identifier`` or from the
    ``submission_hash`` / ``submission_id`` keys of the data. The returned
    data carries the numeric ``submission_id`` and no ``submission_hash``.
    """
    data = dict(submission_data)
    if raw_identifier is None:
        raw_identifier = data.get('submission_hash') or data.get('submission_id')
    data.pop('submission_hash', None)

    if not raw_identifier:
        data.pop('submission_id', None)
        return data, None

    submission = resolve_submission(form, raw_identifier)
    data['submission_id'] = submission.id
    return data, submission
