"""
Folder lookup and read-only reporting projections.
Folders are reference data owned elsewhere; the engine only resolves them and
counts what sits inside.
"""
import csv
import io

from sqlalchemy import func
from sqlalchemy.orm import Session

from hrdocs.errors import NotFound
from hrdocs.models.document_type import DocumentType
from hrdocs.models.employee_document import EmployeeDocument
from hrdocs.models.folder import DocumentFolder
from hrdocs.utils.ids import new_id, utc_now


def get_folder(db: Session, company_id: str, folder_id: str) -> DocumentFolder:
    folder = (
        db.query(DocumentFolder)
        .filter(DocumentFolder.id == folder_id, DocumentFolder.company_id == company_id)
        .first()
    )
    if not folder:
        raise NotFound("FolderNotFound", "Folder not found")
    return folder


def create_folder(
    db: Session,
    company_id: str,
    user_id: str,
    folder_name: str,
    folder_description: str | None = None,
    display_order: int = 0,
    is_system_folder: bool = False,
) -> DocumentFolder:
    """Add a folder to the session; the caller owns the transaction."""
    now = utc_now()
    folder = DocumentFolder(
        id=new_id(),
        company_id=company_id,
        folder_name=folder_name,
        folder_description=folder_description,
        display_order=display_order,
        is_system_folder=is_system_folder,
        is_active=True,
        created_by=user_id,
        created_at=now,
        updated_at=now,
    )
    db.add(folder)
    db.flush()
    return folder


def _active_document_count(db: Session, company_id: str, employee_id: str | None = None, **filters) -> int:
    query = db.query(func.count(EmployeeDocument.id)).filter(
        EmployeeDocument.company_id == company_id,
        EmployeeDocument.is_active.is_(True),
    )
    if employee_id:
        query = query.filter(EmployeeDocument.employee_id == employee_id)
    for column, value in filters.items():
        query = query.filter(getattr(EmployeeDocument, column) == value)
    return query.scalar()


def list_folders_with_counts(
    db: Session,
    company_id: str,
    employee_id: str | None = None,
    is_active: bool | None = None,
    search: str | None = None,
) -> list[tuple[DocumentFolder, int]]:
    query = db.query(DocumentFolder).filter(DocumentFolder.company_id == company_id)
    if is_active is not None:
        query = query.filter(DocumentFolder.is_active.is_(is_active))
    if search:
        query = query.filter(DocumentFolder.folder_name.ilike(f"%{search}%"))
    folders = query.order_by(DocumentFolder.display_order, DocumentFolder.folder_name).all()
    return [
        (folder, _active_document_count(db, company_id, employee_id, folder_id=folder.id))
        for folder in folders
    ]


def types_in_folder_with_counts(
    db: Session,
    company_id: str,
    folder_id: str | None = None,
    employee_id: str | None = None,
    is_active: bool | None = None,
    search: str | None = None,
) -> list[tuple[DocumentType, int]]:
    """Document types (optionally of one folder) with their active file counts."""
    query = db.query(DocumentType).filter(DocumentType.company_id == company_id)
    if folder_id:
        get_folder(db, company_id, folder_id)
        query = query.filter(DocumentType.folder_id == folder_id)
    if is_active is not None:
        query = query.filter(DocumentType.is_active.is_(is_active))
    if search:
        query = query.filter(
            DocumentType.name.ilike(f"%{search}%") | DocumentType.code.ilike(f"%{search}%")
        )
    types = query.order_by(DocumentType.display_order, DocumentType.name).all()
    return [
        (doc_type, _active_document_count(db, company_id, employee_id, document_type_id=doc_type.id))
        for doc_type in types
    ]


def documents_in_folder(
    db: Session,
    company_id: str,
    folder_id: str | None = None,
    document_type_id: str | None = None,
    employee_id: str | None = None,
    is_active: bool | None = None,
    from_date: str | None = None,
    to_date: str | None = None,
    search: str | None = None,
) -> list[EmployeeDocument]:
    query = db.query(EmployeeDocument).filter(EmployeeDocument.company_id == company_id)
    if folder_id:
        query = query.filter(EmployeeDocument.folder_id == folder_id)
    if document_type_id:
        query = query.filter(EmployeeDocument.document_type_id == document_type_id)
    if employee_id:
        query = query.filter(EmployeeDocument.employee_id == employee_id)
    if is_active is not None:
        query = query.filter(EmployeeDocument.is_active.is_(is_active))
    # created_at is ISO text, so a date prefix compares correctly
    if from_date:
        query = query.filter(EmployeeDocument.created_at >= from_date)
    if to_date:
        query = query.filter(EmployeeDocument.created_at <= f"{to_date}T23:59:59Z")
    if search:
        query = query.filter(
            EmployeeDocument.document_number.ilike(f"%{search}%")
            | EmployeeDocument.document_description.ilike(f"%{search}%")
            | EmployeeDocument.file_name.ilike(f"%{search}%")
        )
    return query.order_by(EmployeeDocument.created_at.desc()).all()


EXPORT_COLUMNS = [
    "document_id", "employee_id", "document_type_code", "document_type_name",
    "folder_id", "document_number", "file_name", "issue_date", "expiry_date",
    "is_not_applicable", "not_applicable_reason", "is_active", "created_at",
]


def export_documents_csv(documents: list[EmployeeDocument]) -> str:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(EXPORT_COLUMNS)
    for doc in documents:
        writer.writerow([
            doc.id, doc.employee_id, doc.document_type.code, doc.document_type.name,
            doc.folder_id, doc.document_number, doc.file_name, doc.issue_date,
            doc.expiry_date, bool(doc.is_not_applicable), doc.not_applicable_reason,
            bool(doc.is_active), doc.created_at,
        ])
    return output.getvalue()
