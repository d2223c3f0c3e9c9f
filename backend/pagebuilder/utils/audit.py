from flask import g
from pagebuilder.extensions import db
from pagebuilder.models.audit_log import AuditLog
from typing import Optional


def log_action(
    *,
    action: str,
    entity_type: str,
    entity_id: Optional[str],
    payload: dict | None = None,
    clinic_id: Optional[str] = None,
    actor_id: Optional[str] = None,
) -> Optional[AuditLog]:
    """
    Queue an audit row; the caller's transaction commits it.

    Clinic and actor default to the request context set by
    ``clinic_access_required``. Without either, nothing is recorded.
    """
    clinic_id = clinic_id or g.get("current_clinic_id")
    actor_id = actor_id or g.get("current_user_id")
    if not clinic_id or not actor_id:
        return None

    log = AuditLog(
        clinic_id=clinic_id,
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        payload=payload or {},
    )
    db.session.add(log)
    return log
