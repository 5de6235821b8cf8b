from hrdocs.models.folder import DocumentFolder
from hrdocs.models.document_type import DocumentType, DocumentField
from hrdocs.models.employee_document import EmployeeDocument, EmployeeDocumentFieldValue
from hrdocs.models.audit_event import AuditEvent
from hrdocs.models.slot_lock import document_slot_locks

__all__ = [
    "DocumentFolder",
    "DocumentType",
    "DocumentField",
    "EmployeeDocument",
    "EmployeeDocumentFieldValue",
    "AuditEvent",
    "document_slot_locks",
]
