from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hrdocs.database import get_db
from hrdocs.dependencies import RequestContext, get_request_context
from hrdocs.schemas.audit import AuditEventResponse
from hrdocs.services import audit_service

router = APIRouter(prefix="/audit-events", tags=["audit"])


@router.get("", response_model=list[AuditEventResponse])
async def list_audit_events(
    document_id: str | None = None,
    document_type_id: str | None = None,
    action: str | None = None,
    limit: int = Query(100, ge=1, le=1000),
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    events = audit_service.list_events(
        db, ctx.company_id, document_id=document_id, type_id=document_type_id, action=action, limit=limit
    )
    return [
        AuditEventResponse(
            id=e.id,
            company_id=e.company_id,
            employee_document_id=e.employee_document_id,
            document_type_id=e.document_type_id,
            folder_id=e.folder_id,
            action=e.action,
            performed_by=e.performed_by,
            performed_on_behalf_of=e.performed_on_behalf_of,
            action_details=e.action_details,
            created_at=e.created_at,
        )
        for e in events
    ]
