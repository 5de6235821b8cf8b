"""
Lifecycle of employee documents: upload, update, delete and N/A marking.

Every mutation follows the same shape: load the document type, validate the
request, then inside one transaction take the (employee, type) slot lock,
re-count the employee's documents, apply the cardinality / mandatory rules
from ``policy`` and only then write the document, its field values and the
audit event.
"""
import logging
from datetime import date, datetime

from sqlalchemy import func, text
from sqlalchemy.orm import Session

from hrdocs.config import settings
from hrdocs.database import atomic
from hrdocs.errors import NotFound, ValidationFailed
from hrdocs.models.document_type import DocumentType
from hrdocs.models.employee_document import EmployeeDocument
from hrdocs.schemas.document import DocumentCreate, DocumentUpdate
from hrdocs.services import audit_service, field_value_service
from hrdocs.services.document_type_service import get_type
from hrdocs.services.policy import (
    check_mandatory_guard,
    check_not_applicable,
    check_upload_slot,
    policy_for,
)
from hrdocs.utils.ids import new_id, utc_now

logger = logging.getLogger("hrdocs.lifecycle")

UPDATABLE_FIELDS = (
    "document_number",
    "document_description",
    "issue_date",
    "expiry_date",
    "is_not_applicable",
    "not_applicable_reason",
    "is_active",
)


def get_document(db: Session, company_id: str, document_id: str) -> EmployeeDocument:
    document = (
        db.query(EmployeeDocument)
        .filter(EmployeeDocument.id == document_id, EmployeeDocument.company_id == company_id)
        .first()
    )
    if not document:
        raise NotFound("DocumentNotFound", "Document not found")
    return document


def list_employee_documents(
    db: Session,
    company_id: str,
    employee_id: str,
    document_type_id: str | None = None,
    is_active: bool | None = None,
    search: str | None = None,
) -> list[EmployeeDocument]:
    query = db.query(EmployeeDocument).filter(
        EmployeeDocument.company_id == company_id,
        EmployeeDocument.employee_id == employee_id,
    )
    if document_type_id:
        query = query.filter(EmployeeDocument.document_type_id == document_type_id)
    if is_active is not None:
        query = query.filter(EmployeeDocument.is_active.is_(is_active))
    if search:
        query = query.filter(
            EmployeeDocument.document_number.ilike(f"%{search}%")
            | EmployeeDocument.document_description.ilike(f"%{search}%")
            | EmployeeDocument.file_name.ilike(f"%{search}%")
        )
    return query.order_by(EmployeeDocument.created_at.desc()).all()


def _lock_slot(db: Session, company_id: str, employee_id: str, type_id: str):
    # The upsert is the transaction's first write, so concurrent mutations of
    # the same (employee, type) queue here until the holder commits.
    db.execute(
        text(
            """
            INSERT INTO document_slot_locks (company_id, employee_id, document_type_id, version, updated_at)
            VALUES (:company_id, :employee_id, :type_id, 1, :now)
            ON CONFLICT(company_id, employee_id, document_type_id) DO UPDATE SET
                version = version + 1,
                updated_at = :now
            """
        ),
        {"company_id": company_id, "employee_id": employee_id, "type_id": type_id, "now": utc_now()},
    )


def _slot_query(db: Session, company_id: str, employee_id: str, type_id: str, exclude_id: str | None):
    query = db.query(func.count(EmployeeDocument.id)).filter(
        EmployeeDocument.company_id == company_id,
        EmployeeDocument.employee_id == employee_id,
        EmployeeDocument.document_type_id == type_id,
        EmployeeDocument.is_active.is_(True),
    )
    if exclude_id:
        query = query.filter(EmployeeDocument.id != exclude_id)
    return query


def active_count(db: Session, company_id: str, employee_id: str, type_id: str,
                 exclude_id: str | None = None) -> int:
    """Active, non-NA documents of one employee for one type."""
    return _slot_query(db, company_id, employee_id, type_id, exclude_id).filter(
        EmployeeDocument.is_not_applicable.is_(False)
    ).scalar()


def na_sibling_exists(db: Session, company_id: str, employee_id: str, type_id: str,
                      exclude_id: str | None = None) -> bool:
    return _slot_query(db, company_id, employee_id, type_id, exclude_id).filter(
        EmployeeDocument.is_not_applicable.is_(True)
    ).scalar() > 0


def _parse_date(name: str, value: str | None) -> date | None:
    if value is None:
        return None
    # Only the extended YYYY-MM-DD form; stored dates are compared as text.
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationFailed("InvalidDate", f"{name} must be a date (YYYY-MM-DD)")


def _check_dates(doc_type: DocumentType, issue_date: str | None, expiry_date: str | None,
                 needs_expiry: bool) -> tuple[str | None, str | None]:
    """Validate the date pair and return it normalized to ISO text."""
    issued = _parse_date("issue_date", issue_date)
    expires = _parse_date("expiry_date", expiry_date)
    if needs_expiry and doc_type.require_expiry_date and expires is None:
        raise ValidationFailed(
            "ExpiryDateRequired", f"Document type '{doc_type.name}' requires an expiry date"
        )
    if issued and expires and expires < issued:
        raise ValidationFailed("InvalidDateRange", "expiry_date cannot be before issue_date")
    return (
        issued.isoformat() if issued else None,
        expires.isoformat() if expires else None,
    )


def _file_extension(req: DocumentCreate) -> str:
    if req.file_extension:
        return req.file_extension.lower().lstrip(".")
    if req.file_name and "." in req.file_name:
        return req.file_name.rsplit(".", 1)[1].lower()
    return ""


def _check_file(doc_type: DocumentType, req: DocumentCreate):
    if not req.file_name or not req.file_path:
        raise ValidationFailed("FileRequired", "File upload is required for this document type")
    extension = _file_extension(req)
    allowed = doc_type.extensions
    if allowed and extension not in allowed:
        raise ValidationFailed(
            "FileTypeNotAllowed",
            f"File type '{extension or 'unknown'}' is not allowed. Allowed: {', '.join(sorted(allowed))}",
        )
    if req.file_size_kb is not None and req.file_size_kb > doc_type.max_file_size_mb * 1024:
        raise ValidationFailed(
            "FileTooLarge", f"File exceeds the {doc_type.max_file_size_mb} MB limit"
        )


def create_document(
    db: Session,
    company_id: str,
    employee_id: str,
    actor_id: str,
    req: DocumentCreate,
) -> EmployeeDocument:
    """Upload a document, or record an N/A entry, for an employee."""
    doc_type = get_type(db, company_id, req.document_type_id)
    if not doc_type.is_active:
        raise ValidationFailed("TypeInactive", f"Document type '{doc_type.name}' is not active")

    if req.is_not_applicable:
        # N/A entries hold no file and never occupy an upload slot.
        check_not_applicable(doc_type.allow_not_applicable, req.not_applicable_reason, doc_type.name)
        issue_date, expiry_date = _check_dates(doc_type, req.issue_date, req.expiry_date, needs_expiry=False)
    else:
        _check_file(doc_type, req)
        issue_date, expiry_date = _check_dates(doc_type, req.issue_date, req.expiry_date, needs_expiry=True)

    now = utc_now()
    document = EmployeeDocument(
        id=new_id(),
        company_id=company_id,
        employee_id=employee_id,
        document_type_id=doc_type.id,
        folder_id=doc_type.folder_id,
        document_number=req.document_number,
        document_description=req.document_description,
        issue_date=issue_date,
        expiry_date=expiry_date,
        is_not_applicable=req.is_not_applicable,
        not_applicable_reason=req.not_applicable_reason if req.is_not_applicable else None,
        is_active=True,
        uploaded_by=actor_id,
        created_at=now,
        updated_at=now,
    )
    if not req.is_not_applicable:
        document.file_name = req.file_name
        document.file_path = req.file_path
        document.file_size_kb = req.file_size_kb
        document.file_type = req.file_type
        document.file_extension = _file_extension(req) or None

    with atomic(db):
        _lock_slot(db, company_id, employee_id, doc_type.id)
        if not req.is_not_applicable:
            check_upload_slot(
                policy_for(doc_type),
                active_count(db, company_id, employee_id, doc_type.id),
                doc_type.name,
            )
        db.add(document)
        db.flush()
        field_value_service.set_values(db, document, req.field_values, replace=False)
        audit_service.emit(
            db, "document_uploaded", company_id, actor_id,
            document_id=document.id, type_id=doc_type.id, folder_id=document.folder_id,
            on_behalf_of_id=employee_id if employee_id != actor_id else None,
            details={
                "document_number": req.document_number,
                "file_name": document.file_name,
                "is_not_applicable": req.is_not_applicable,
            },
        )

    db.refresh(document)
    logger.info(
        "Uploaded document %s type=%s employee=%s na=%s",
        document.id, doc_type.code, employee_id, document.is_not_applicable,
    )
    return document


def update_document(
    db: Session,
    company_id: str,
    document_id: str,
    actor_id: str,
    req: DocumentUpdate,
) -> EmployeeDocument:
    """Patch a document. Supplied field values replace the stored set wholesale."""
    document = get_document(db, company_id, document_id)
    doc_type = get_type(db, company_id, document.document_type_id)

    patch = req.model_dump(exclude_unset=True, exclude={"field_values"})
    patch = {k: v for k, v in patch.items() if k in UPDATABLE_FIELDS}
    for flag in ("is_active", "is_not_applicable"):
        if flag in patch and patch[flag] is None:
            del patch[flag]

    target_na = patch.get("is_not_applicable", bool(document.is_not_applicable))
    target_active = patch.get("is_active", bool(document.is_active))
    turning_na_on = patch.get("is_not_applicable") is True
    turning_na_off = patch.get("is_not_applicable") is False and bool(document.is_not_applicable)
    deactivating = patch.get("is_active") is False and bool(document.is_active)
    starts_counting = (
        not document.counts_toward_slot and target_active and not target_na
    )

    if turning_na_on:
        reason = patch.get("not_applicable_reason")
        if reason is None and document.is_not_applicable:
            reason = document.not_applicable_reason
        check_not_applicable(doc_type.allow_not_applicable, reason, doc_type.name)
        patch["not_applicable_reason"] = reason
    if turning_na_off:
        if not document.file_name or not document.file_path:
            raise ValidationFailed(
                "FileRequired", "A document without a file cannot be un-marked as not applicable"
            )
    if target_na and not turning_na_on and "not_applicable_reason" in patch:
        check_not_applicable(doc_type.allow_not_applicable, patch["not_applicable_reason"], doc_type.name)
    if not target_na and ("not_applicable_reason" in patch or turning_na_off):
        # only N/A documents carry a reason
        patch["not_applicable_reason"] = None

    issue_date, expiry_date = _check_dates(
        doc_type,
        patch.get("issue_date", document.issue_date),
        patch.get("expiry_date", document.expiry_date),
        needs_expiry=not target_na and ("expiry_date" in patch or turning_na_off),
    )
    if "issue_date" in patch:
        patch["issue_date"] = issue_date
    if "expiry_date" in patch:
        patch["expiry_date"] = expiry_date

    with atomic(db):
        _lock_slot(db, company_id, document.employee_id, doc_type.id)
        if deactivating and doc_type.is_mandatory:
            check_mandatory_guard(
                doc_type,
                active_count(db, company_id, document.employee_id, doc_type.id, exclude_id=document.id),
                na_sibling_exists(db, company_id, document.employee_id, doc_type.id, exclude_id=document.id),
                action="deactivate",
                strict=settings.strict_mandatory_guard,
            )
        if starts_counting:
            check_upload_slot(
                policy_for(doc_type),
                active_count(db, company_id, document.employee_id, doc_type.id, exclude_id=document.id),
                doc_type.name,
            )

        for key, value in patch.items():
            setattr(document, key, value)
        document.updated_by = actor_id
        document.updated_at = utc_now()
        db.flush()

        if req.field_values is not None:
            field_value_service.set_values(db, document, req.field_values, replace=True)

        details = dict(patch)
        if req.field_values is not None:
            details["field_values_replaced"] = len(req.field_values)
        audit_service.emit(
            db, "document_updated", company_id, actor_id,
            document_id=document.id, type_id=doc_type.id, folder_id=document.folder_id,
            on_behalf_of_id=document.employee_id if document.employee_id != actor_id else None,
            details=details,
        )

    db.refresh(document)
    logger.info("Updated document %s fields=%s", document.id, sorted(patch))
    return document


def delete_document(db: Session, company_id: str, document_id: str, actor_id: str):
    """Hard-delete a document and its values, guarded by the mandatory rule."""
    document = get_document(db, company_id, document_id)
    employee_id = document.employee_id
    doc_type = (
        db.query(DocumentType)
        .filter(DocumentType.id == document.document_type_id, DocumentType.company_id == company_id)
        .first()
    )

    with atomic(db):
        _lock_slot(db, company_id, document.employee_id, document.document_type_id)
        if doc_type is not None and doc_type.is_mandatory:
            check_mandatory_guard(
                doc_type,
                active_count(db, company_id, document.employee_id, doc_type.id, exclude_id=document.id),
                na_sibling_exists(db, company_id, document.employee_id, doc_type.id, exclude_id=document.id),
                action="delete",
                strict=settings.strict_mandatory_guard,
            )
        # Recorded before the row goes so the event references a live document.
        audit_service.emit(
            db, "document_deleted", company_id, actor_id,
            document_id=document.id, type_id=document.document_type_id, folder_id=document.folder_id,
            on_behalf_of_id=document.employee_id if document.employee_id != actor_id else None,
            details={"document_number": document.document_number, "file_name": document.file_name},
        )
        db.delete(document)

    logger.info("Deleted document %s employee=%s", document_id, employee_id)


def mark_not_applicable(
    db: Session,
    company_id: str,
    document_id: str,
    actor_id: str,
    reason: str | None,
) -> EmployeeDocument:
    """Flag an existing document as not applicable; other documents are untouched."""
    document = get_document(db, company_id, document_id)
    doc_type = get_type(db, company_id, document.document_type_id)
    check_not_applicable(doc_type.allow_not_applicable, reason, doc_type.name)

    with atomic(db):
        _lock_slot(db, company_id, document.employee_id, doc_type.id)
        document.is_not_applicable = True
        document.not_applicable_reason = reason
        document.updated_by = actor_id
        document.updated_at = utc_now()
        db.flush()
        audit_service.emit(
            db, "document_marked_na", company_id, actor_id,
            document_id=document.id, type_id=doc_type.id, folder_id=document.folder_id,
            on_behalf_of_id=document.employee_id if document.employee_id != actor_id else None,
            details={"reason": reason},
        )

    db.refresh(document)
    logger.info("Marked document %s not applicable", document.id)
    return document
