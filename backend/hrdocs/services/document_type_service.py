"""
Document type registry: per-company type configuration and its field schema.
"""
import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hrdocs.config import settings
from hrdocs.database import atomic
from hrdocs.errors import Conflict, NotFound, ProtectedResource
from hrdocs.models.document_type import DocumentField, DocumentType
from hrdocs.models.employee_document import EmployeeDocument, EmployeeDocumentFieldValue
from hrdocs.schemas.document_type import (
    DocumentTypeCreate,
    DocumentTypeUpdate,
    FieldCreate,
    FieldUpdate,
)
from hrdocs.services import audit_service
from hrdocs.services.field_schema import validate_field_definition
from hrdocs.services.folder_service import get_folder
from hrdocs.utils.ids import new_id, utc_now

logger = logging.getLogger("hrdocs.registry")


def get_type(db: Session, company_id: str, type_id: str) -> DocumentType:
    doc_type = (
        db.query(DocumentType)
        .filter(DocumentType.id == type_id, DocumentType.company_id == company_id)
        .first()
    )
    if not doc_type:
        raise NotFound("TypeNotFound", "Document type not found")
    return doc_type


def get_field(db: Session, company_id: str, type_id: str, field_id: str) -> DocumentField:
    field = (
        db.query(DocumentField)
        .join(DocumentType, DocumentField.document_type_id == DocumentType.id)
        .filter(
            DocumentField.id == field_id,
            DocumentField.document_type_id == type_id,
            DocumentType.company_id == company_id,
        )
        .first()
    )
    if not field:
        raise NotFound("FieldNotFound", "Field not found")
    return field


def active_document_count(db: Session, doc_type: DocumentType) -> int:
    return db.query(func.count(EmployeeDocument.id)).filter(
        EmployeeDocument.document_type_id == doc_type.id,
        EmployeeDocument.company_id == doc_type.company_id,
        EmployeeDocument.is_active.is_(True),
    ).scalar()


def _code_taken(db: Session, company_id: str, code: str, exclude_id: str | None = None) -> bool:
    query = db.query(DocumentType.id).filter(
        DocumentType.company_id == company_id, DocumentType.code == code
    )
    if exclude_id:
        query = query.filter(DocumentType.id != exclude_id)
    return query.first() is not None


def _build_field(type_id: str, req: FieldCreate, position: int) -> DocumentField:
    validate_field_definition(req.field_type, req.field_values, req.validation_rules)
    now = utc_now()
    return DocumentField(
        id=new_id(),
        document_type_id=type_id,
        field_name=req.field_name,
        field_label=req.field_label,
        field_type=req.field_type,
        field_values=req.field_values,
        placeholder=req.placeholder,
        default_value=req.default_value,
        validation_rules=req.validation_rules,
        is_required=req.is_required,
        is_readonly=req.is_readonly,
        is_visible=req.is_visible,
        display_order=req.display_order if req.display_order is not None else position,
        help_text=req.help_text,
        created_at=now,
        updated_at=now,
    )


def create_type(db: Session, company_id: str, user_id: str, req: DocumentTypeCreate) -> DocumentType:
    """Create a type together with its fields; nothing is kept if any field fails."""
    if _code_taken(db, company_id, req.code):
        raise Conflict("DuplicateTypeCode", f"Document type '{req.code}' already exists")
    get_folder(db, company_id, req.folder_id)

    now = utc_now()
    doc_type = DocumentType(
        id=new_id(),
        company_id=company_id,
        folder_id=req.folder_id,
        code=req.code,
        name=req.name,
        description=req.description,
        allow_single=req.allow_single,
        allow_multiple=req.allow_multiple,
        is_mandatory=req.is_mandatory,
        allow_not_applicable=req.allow_not_applicable,
        require_expiry_date=req.require_expiry_date,
        allowed_file_types=req.allowed_file_types or settings.default_allowed_file_types,
        max_file_size_mb=req.max_file_size_mb or settings.default_max_file_size_mb,
        display_order=req.display_order,
        is_system_type=req.is_system_type,
        is_active=True,
        created_by=user_id,
        created_at=now,
        updated_at=now,
    )

    try:
        with atomic(db):
            db.add(doc_type)
            db.flush()
            seen: set[str] = set()
            for position, field_req in enumerate(req.fields):
                if field_req.field_name in seen:
                    raise Conflict(
                        "DuplicateFieldName", f"Field '{field_req.field_name}' already exists"
                    )
                seen.add(field_req.field_name)
                db.add(_build_field(doc_type.id, field_req, position))
                db.flush()
            audit_service.emit(
                db, "document_type_created", company_id, user_id,
                type_id=doc_type.id, folder_id=doc_type.folder_id,
                details={"code": doc_type.code, "name": doc_type.name, "fields": len(req.fields)},
            )
    except IntegrityError as exc:
        raise Conflict("DuplicateTypeCode", f"Document type '{req.code}' already exists") from exc

    db.refresh(doc_type)
    logger.info("Created document type %s (%s) for company %s", doc_type.code, doc_type.id, company_id)
    return doc_type


def update_type(db: Session, company_id: str, type_id: str, user_id: str, req: DocumentTypeUpdate) -> DocumentType:
    """Patch a type. Existing documents are not re-validated against the new policy."""
    doc_type = get_type(db, company_id, type_id)
    update_data = req.model_dump(exclude_unset=True)

    new_code = update_data.get("code")
    if new_code is not None and new_code != doc_type.code:
        if doc_type.is_system_type:
            raise ProtectedResource("ProtectedType", "Cannot change code of system document type")
        if _code_taken(db, company_id, new_code, exclude_id=doc_type.id):
            raise Conflict("DuplicateTypeCode", f"Document type '{new_code}' already exists")
    if update_data.get("folder_id"):
        get_folder(db, company_id, update_data["folder_id"])

    # description is the only nullable attribute; null elsewhere means "unchanged"
    update_data = {k: v for k, v in update_data.items() if v is not None or k == "description"}

    try:
        with atomic(db):
            for key, value in update_data.items():
                setattr(doc_type, key, value)
            doc_type.updated_by = user_id
            doc_type.updated_at = utc_now()
            db.flush()
            audit_service.emit(
                db, "document_type_updated", company_id, user_id,
                type_id=doc_type.id, folder_id=doc_type.folder_id, details=update_data,
            )
    except IntegrityError as exc:
        raise Conflict("DuplicateTypeCode", f"Document type '{new_code}' already exists") from exc

    db.refresh(doc_type)
    return doc_type


def delete_type(db: Session, company_id: str, type_id: str, user_id: str):
    doc_type = get_type(db, company_id, type_id)
    if doc_type.is_system_type:
        raise ProtectedResource("ProtectedType", "Cannot delete system document type")

    # Any reference blocks deletion, inactive documents included.
    in_use = db.query(func.count(EmployeeDocument.id)).filter(
        EmployeeDocument.document_type_id == type_id
    ).scalar()
    if in_use:
        raise Conflict("TypeInUse", "Cannot delete document type with existing documents")

    with atomic(db):
        audit_service.emit(
            db, "document_type_deleted", company_id, user_id,
            type_id=doc_type.id, folder_id=doc_type.folder_id,
            details={"code": doc_type.code, "name": doc_type.name},
        )
        db.delete(doc_type)
    logger.info("Deleted document type %s (%s)", doc_type.code, type_id)


def add_field(db: Session, company_id: str, type_id: str, req: FieldCreate) -> DocumentField:
    doc_type = get_type(db, company_id, type_id)
    existing = db.query(DocumentField).filter(
        DocumentField.document_type_id == type_id,
        DocumentField.field_name == req.field_name,
    ).first()
    if existing:
        raise Conflict("DuplicateFieldName", f"Field '{req.field_name}' already exists")

    field = _build_field(doc_type.id, req, position=req.display_order or 0)
    with atomic(db):
        db.add(field)
    db.refresh(field)
    return field


def update_field(db: Session, company_id: str, type_id: str, field_id: str, req: FieldUpdate) -> DocumentField:
    field = get_field(db, company_id, type_id, field_id)
    update_data = req.model_dump(exclude_unset=True)
    for key in ("field_label", "field_type", "is_required", "is_readonly", "is_visible", "display_order"):
        if key in update_data and update_data[key] is None:
            del update_data[key]

    validate_field_definition(
        update_data.get("field_type", field.field_type),
        update_data.get("field_values", field.field_values),
        update_data.get("validation_rules", field.validation_rules),
    )
    with atomic(db):
        for key, value in update_data.items():
            setattr(field, key, value)
        field.updated_at = utc_now()
    db.refresh(field)
    return field


def delete_field(db: Session, company_id: str, type_id: str, field_id: str, cascade_values: bool = False):
    """Remove a field. Stored values stay behind, inert, unless cascade_values is set."""
    field = get_field(db, company_id, type_id, field_id)
    with atomic(db):
        if cascade_values:
            db.query(EmployeeDocumentFieldValue).filter(
                EmployeeDocumentFieldValue.field_id == field_id
            ).delete(synchronize_session=False)
        db.delete(field)
