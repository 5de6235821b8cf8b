from sqlalchemy import Column, JSON, Text, event
from hrdocs.database import Base

AUDIT_ACTIONS = {
    "document_type_created",
    "document_type_updated",
    "document_type_deleted",
    "document_uploaded",
    "document_updated",
    "document_deleted",
    "document_marked_na",
}


class AuditEvent(Base):
    __tablename__ = "document_audit_logs"

    id = Column(Text, primary_key=True)
    company_id = Column(Text, nullable=False)
    employee_document_id = Column(Text)
    document_type_id = Column(Text)
    folder_id = Column(Text)
    action = Column(Text, nullable=False)
    performed_by = Column(Text, nullable=False)
    performed_on_behalf_of = Column(Text)
    action_details = Column(JSON)
    created_at = Column(Text, nullable=False)


@event.listens_for(AuditEvent, "before_update")
@event.listens_for(AuditEvent, "before_delete")
def _reject_mutation(mapper, connection, target):
    raise RuntimeError("Audit events are append-only")
