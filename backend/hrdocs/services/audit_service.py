"""Append-only audit trail for document and document-type mutations.

``emit`` only adds the event to the caller's session and flushes it. It never
commits, so the event lands in the same transaction as the write it records
and both roll back together.
"""
import logging
from typing import Any

from sqlalchemy.orm import Session

from hrdocs.models.audit_event import AUDIT_ACTIONS, AuditEvent
from hrdocs.utils.ids import new_id, utc_now

logger = logging.getLogger("hrdocs.audit")


def emit(
    db: Session,
    event_type: str,
    company_id: str,
    actor_id: str,
    document_id: str | None = None,
    type_id: str | None = None,
    folder_id: str | None = None,
    on_behalf_of_id: str | None = None,
    details: dict[str, Any] | None = None,
) -> AuditEvent:
    """Record one audit event inside the current unit of work.

    Args:
        db: Session carrying the mutating transaction
        event_type: One of AUDIT_ACTIONS (e.g. "document_uploaded")
        company_id: Tenant the event belongs to
        actor_id: User who performed the action
        document_id: Affected employee document, if any
        type_id: Affected document type
        folder_id: Folder of the affected type/document
        on_behalf_of_id: Employee acted for, when different from the actor
        details: Free-form JSON payload
    """
    if event_type not in AUDIT_ACTIONS:
        raise ValueError(f"Unknown audit action '{event_type}'")

    entry = AuditEvent(
        id=new_id(),
        company_id=company_id,
        employee_document_id=document_id,
        document_type_id=type_id,
        folder_id=folder_id,
        action=event_type,
        performed_by=actor_id,
        performed_on_behalf_of=on_behalf_of_id,
        action_details=details,
        created_at=utc_now(),
    )
    db.add(entry)
    db.flush()
    logger.info(
        "%s company=%s document=%s type=%s actor=%s",
        event_type, company_id, document_id, type_id, actor_id,
    )
    return entry


def list_events(
    db: Session,
    company_id: str,
    document_id: str | None = None,
    type_id: str | None = None,
    action: str | None = None,
    limit: int = 100,
) -> list[AuditEvent]:
    query = db.query(AuditEvent).filter(AuditEvent.company_id == company_id)
    if document_id:
        query = query.filter(AuditEvent.employee_document_id == document_id)
    if type_id:
        query = query.filter(AuditEvent.document_type_id == type_id)
    if action:
        query = query.filter(AuditEvent.action == action)
    return query.order_by(AuditEvent.created_at.asc(), AuditEvent.id).limit(limit).all()
