from typing import Any

from pydantic import BaseModel


class AuditEventResponse(BaseModel):
    id: str
    company_id: str
    employee_document_id: str | None
    document_type_id: str | None
    folder_id: str | None
    action: str
    performed_by: str
    performed_on_behalf_of: str | None
    action_details: dict[str, Any] | None
    created_at: str
