"""
Audit logging module for immutable audit trail.

Security relevant events (rejected legacy submission identifiers,
property saves, submission writes) are recorded with an integrity
hash. This module is append-only - records are never modified or deleted.
"""

import json
from datetime import datetime
from typing import Dict, Any, Optional
from flask import request, current_app

from formforge import db
from formforge.models import AuditLog


class AuditAction:
    """Constants for audit actions."""
    # Submission actions
    SUBMISSION_CREATED = 'submission_created'
    SUBMISSION_UPDATED = 'submission_updated'
    LEGACY_IDENTIFIER_REJECTED = 'legacy_identifier_rejected'

    # Form actions
    FORM_PROPERTIES_SAVED = 'form_properties_saved'
    FORM_PROPERTIES_REJECTED = 'form_properties_rejected'


class AuditCategory:
    """Constants for audit action categories."""
    CREATE = 'create'
    READ = 'read'
    UPDATE = 'update'
    VALIDATE = 'validate'


def log_action(
    action: str,
    action_category: str,
    resource_type: str,
    resource_id: Optional[str] = None,
    workspace_id: Optional[int] = None,
    actor_type: str = 'system',
    actor_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    success: bool = True,
    error_message: Optional[str] = None
) -> Optional[AuditLog]:
    """
    Log an action to the audit trail.

    Args:
        action: The action performed (use AuditAction constants)
        action_category: Category of action (use AuditCategory constants)
        resource_type: Type of resource affected
        resource_id: Identifier of the resource
        workspace_id: Owning workspace if applicable
        actor_type: Type of actor ('user', 'system')
        actor_id: Identifier of the actor (IP, user id, etc.)
        details: Additional structured details
        success: Whether the action succeeded
        error_message: Error message if action failed

    Returns:
        The created AuditLog record, or None if it could not be written
    """
    try:
        ip_address = None
        user_agent = None

        try:
            if request:
                ip_address = request.remote_addr
                user_agent = request.headers.get('User-Agent')

                if actor_type == 'user' and not actor_id:
                    actor_id = ip_address
        except RuntimeError:
            # Outside request context
            pass

        audit_log = AuditLog(
            timestamp=datetime.utcnow(),
            action=action,
            action_category=action_category,
            resource_type=resource_type,
            resource_id=str(resource_id) if resource_id is not None else None,
            workspace_id=workspace_id,
            actor_type=actor_type,
            actor_id=actor_id,
            details_json=json.dumps(details, sort_keys=True, default=str) if details else None,
            success=success,
            error_message=error_message,
            ip_address=ip_address,
            user_agent=user_agent
        )
        audit_log.integrity_hash = audit_log.compute_integrity_hash()

        db.session.add(audit_log)
        db.session.commit()

        return audit_log

    except Exception as e:
        current_app.logger.error(f'Failed to create audit log: {str(e)}')
        db.session.rollback()
        return None


def log_legacy_identifier_rejected(form_id: int, submission_id: int) -> Optional[AuditLog]:
    """Log an attempt to reach a UUID submission through its Hashid."""
    return log_action(
        action=AuditAction.LEGACY_IDENTIFIER_REJECTED,
        action_category=AuditCategory.READ,
        resource_type='submission',
        resource_id=str(submission_id),
        actor_type='user',
        details={'form_id': form_id},
        success=False,
        error_message='Legacy identifier used for a submission with a public id'
    )


def log_submission_saved(submission_id: int, form_id: int, created: bool) -> Optional[AuditLog]:
    return log_action(
        action=AuditAction.SUBMISSION_CREATED if created else AuditAction.SUBMISSION_UPDATED,
        action_category=AuditCategory.CREATE if created else AuditCategory.UPDATE,
        resource_type='submission',
        resource_id=str(submission_id),
        actor_type='user',
        details={'form_id': form_id}
    )


def log_properties_validation(form_id: int, workspace_id: Optional[int], passed: bool,
                              error_count: int = 0) -> Optional[AuditLog]:
    """Log the outcome of a form properties save."""
    return log_action(
        action=AuditAction.FORM_PROPERTIES_SAVED if passed else AuditAction.FORM_PROPERTIES_REJECTED,
        action_category=AuditCategory.VALIDATE,
        resource_type='form',
        resource_id=str(form_id),
        workspace_id=workspace_id,
        actor_type='user',
        details={'error_count': error_count} if error_count else None,
        success=passed
    )
