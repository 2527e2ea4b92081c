"""
Database models for FormForge.

Only what the validation core reads is modelled here:
- Workspaces and the OAuth providers connected to them
- Forms with their block list
- Submissions with their public (UUID) identifier
- Audit trail
"""

import json
import hashlib
import uuid
from datetime import datetime
from enum import Enum as PyEnum
from formforge import db


class FormVisibility(PyEnum):
    """Who can open a form."""
    PUBLIC = 'public'
    CLOSED = 'closed'
    PRIVATE = 'private'


workspace_providers = db.Table(
    'workspace_providers',
    db.Column('workspace_id', db.Integer, db.ForeignKey('workspaces.id'), primary_key=True),
    db.Column('provider_id', db.Integer, db.ForeignKey('oauth_providers.id'), primary_key=True),
)


class Workspace(db.Model):
    __tablename__ = 'workspaces'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, default='My Workspace')
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    providers = db.relationship('OAuthProvider', secondary=workspace_providers,
                                backref='workspaces', lazy='dynamic')
    forms = db.relationship('Form', backref='workspace', lazy='dynamic')

    def __repr__(self):
        return f'<Workspace {self.id} - {self.name}>'

    def has_provider(self, provider_id: int) -> bool:
        """Check whether an OAuth provider is connected to this workspace."""
        return self.providers.filter(OAuthProvider.id == provider_id).first() is not None


class OAuthProvider(db.Model):
    """
    An external account connected through OAuth (e.g. a Stripe account).
    """
    __tablename__ = 'oauth_providers'

    id = db.Column(db.Integer, primary_key=True)
    provider = db.Column(db.String(50), nullable=False)  # 'stripe'
    provider_user_id = db.Column(db.String(255), nullable=False)  # 'acct_...'
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f'<OAuthProvider {self.id} - {self.provider}:{self.provider_user_id}>'


class Form(db.Model):
    __tablename__ = 'forms'

    id = db.Column(db.Integer, primary_key=True)
    slug = db.Column(db.String(255), unique=True, nullable=False)
    title = db.Column(db.String(255), nullable=False, default='Untitled form')
    workspace_id = db.Column(db.Integer, db.ForeignKey('workspaces.id'), nullable=True)

    # Block list, stored as JSON with stable ordering
    properties_json = db.Column(db.Text, nullable=False, default='[]')

    visibility = db.Column(db.String(20), default=FormVisibility.PUBLIC.value, nullable=False)
    editable_submissions = db.Column(db.Boolean, default=False, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    submissions = db.relationship('FormSubmission', backref='form', lazy='dynamic')

    def __repr__(self):
        return f'<Form {self.id} - {self.slug}>'

    @property
    def properties(self):
        """Deserialize the block list."""
        return json.loads(self.properties_json or '[]')

    @properties.setter
    def properties(self, value):
        self.properties_json = json.dumps(value or [], sort_keys=True)

    @property
    def is_public(self) -> bool:
        return self.visibility == FormVisibility.PUBLIC.value

    def share_url(self, base_url: str) -> str:
        return f'{base_url.rstrip("/")}/forms/{self.slug}'

    def payment_block(self):
        """Return the first payment block, if any."""
        for block in self.properties:
            if isinstance(block, dict) and block.get('type') == 'payment':
                return block
        return None


class FormSubmission(db.Model):
    """
    Answers to a form.

    public_id is the UUID exposed to respondents. Rows created before UUIDs
    were introduced have no public_id and are addressed by their Hashid.
    """
    __tablename__ = 'form_submissions'

    id = db.Column(db.Integer, primary_key=True)
    form_id = db.Column(db.Integer, db.ForeignKey('forms.id'), nullable=False)
    public_id = db.Column(db.String(36), unique=True, nullable=True, index=True)

    data_json = db.Column(db.Text, nullable=False, default='{}')

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f'<FormSubmission {self.id} - {self.public_id or "legacy"}>'

    @classmethod
    def create(cls, form, data):
        """Create a new submission; new submissions always get a UUID."""
        submission = cls(form_id=form.id, public_id=str(uuid.uuid4()))
        submission.data = data
        return submission

    @property
    def data(self):
        return json.loads(self.data_json or '{}')

    @data.setter
    def data(self, value):
        self.data_json = json.dumps(value or {}, sort_keys=True)

    def to_dict(self, publicly_accessed: bool = False):
        """Convert submission to dictionary for API responses."""
        result = {
            'data': self.data,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
        if not publicly_accessed:
            result['id'] = self.id
            result['public_id'] = self.public_id
        return result


class AuditLog(db.Model):
    """
    Immutable audit trail for security relevant events.

    This table is append-only. Records are never modified or deleted.
    """
    __tablename__ = 'audit_logs'

    id = db.Column(db.Integer, primary_key=True)

    timestamp = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    actor_type = db.Column(db.String(20), nullable=False)  # 'user', 'system'
    actor_id = db.Column(db.String(100), nullable=True)

    action = db.Column(db.String(50), nullable=False)
    action_category = db.Column(db.String(20), nullable=False)

    resource_type = db.Column(db.String(50), nullable=False)  # 'submission', 'payment_block', ...
    resource_id = db.Column(db.String(100), nullable=True)
    workspace_id = db.Column(db.Integer, nullable=True)

    details_json = db.Column(db.Text, nullable=True)

    success = db.Column(db.Boolean, nullable=False)
    error_message = db.Column(db.Text, nullable=True)

    ip_address = db.Column(db.String(45), nullable=True)
    user_agent = db.Column(db.String(500), nullable=True)

    integrity_hash = db.Column(db.String(64), nullable=False)

    def __repr__(self):
        return f'<AuditLog {self.id} - {self.action} by {self.actor_type}>'

    def to_dict(self):
        return {
            'id': self.id,
            'timestamp': self.timestamp.isoformat(),
            'actor_type': self.actor_type,
            'actor_id': self.actor_id,
            'action': self.action,
            'action_category': self.action_category,
            'resource_type': self.resource_type,
            'resource_id': self.resource_id,
            'workspace_id': self.workspace_id,
            'details': json.loads(self.details_json) if self.details_json else None,
            'success': self.success,
            'error_message': self.error_message
        }

    def compute_integrity_hash(self):
        """Compute hash of this record's content for tamper detection."""
        content = f"{self.timestamp}{self.actor_type}{self.actor_id}{self.action}{self.resource_type}{self.resource_id}{self.details_json}"
        return hashlib.sha256(content.encode()).hexdigest()

    def verify_integrity(self):
        return self.integrity_hash == self.compute_integrity_hash()
