from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from hrdocs.database import get_db
from hrdocs.dependencies import RequestContext, get_request_context
from hrdocs.models.employee_document import EmployeeDocument
from hrdocs.routers.document_types import field_to_response
from hrdocs.schemas.document import (
    DocumentCreate,
    DocumentResponse,
    DocumentTypeSummary,
    DocumentUpdate,
    ExpiringDocumentResponse,
    FieldValueResponse,
    MarkNotApplicableRequest,
)
from hrdocs.services import expiry_service, folder_service, lifecycle_service

router = APIRouter(tags=["employee-documents"])


def doc_to_response(doc: EmployeeDocument) -> DocumentResponse:
    doc_type = doc.document_type
    fields = {f.id: f for f in doc_type.fields} if doc_type else {}
    values = []
    for fv in doc.field_values:
        field = fields.get(fv.field_id)
        # values of a deleted field are kept but no longer shown
        if field is None:
            continue
        values.append(FieldValueResponse(
            field_id=fv.field_id,
            field_name=field.field_name,
            field_label=field.field_label,
            field_type=field.field_type,
            field_value=fv.field_value,
        ))

    return DocumentResponse(
        id=doc.id,
        company_id=doc.company_id,
        employee_id=doc.employee_id,
        document_type_id=doc.document_type_id,
        folder_id=doc.folder_id,
        document_number=doc.document_number,
        document_description=doc.document_description,
        file_name=doc.file_name,
        file_path=doc.file_path,
        file_size_kb=doc.file_size_kb,
        file_type=doc.file_type,
        file_extension=doc.file_extension,
        issue_date=doc.issue_date,
        expiry_date=doc.expiry_date,
        is_not_applicable=doc.is_not_applicable,
        not_applicable_reason=doc.not_applicable_reason,
        is_active=doc.is_active,
        uploaded_by=doc.uploaded_by,
        updated_by=doc.updated_by,
        created_at=doc.created_at,
        updated_at=doc.updated_at,
        document_type=DocumentTypeSummary(
            id=doc_type.id,
            code=doc_type.code,
            name=doc_type.name,
            require_expiry_date=doc_type.require_expiry_date,
            fields=[field_to_response(f) for f in doc_type.fields],
        ) if doc_type else None,
        field_values=values,
    )


@router.post("/employees/{employee_id}/documents", response_model=DocumentResponse, status_code=201)
async def upload_document(
    employee_id: str,
    req: DocumentCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    doc = lifecycle_service.create_document(db, ctx.company_id, employee_id, ctx.user_id, req)
    return doc_to_response(doc)


@router.get("/employees/{employee_id}/documents", response_model=list[DocumentResponse])
async def list_employee_documents(
    employee_id: str,
    document_type_id: str | None = None,
    is_active: bool | None = None,
    search: str | None = None,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    docs = lifecycle_service.list_employee_documents(
        db, ctx.company_id, employee_id,
        document_type_id=document_type_id, is_active=is_active, search=search,
    )
    return [doc_to_response(d) for d in docs]


@router.get("/employees/{employee_id}/documents/expiring", response_model=list[ExpiringDocumentResponse])
async def expiring_documents(
    employee_id: str,
    within_days: int | None = Query(None, ge=0, le=3650),
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    rows = expiry_service.expiring_documents(db, ctx.company_id, within_days, employee_id=employee_id)
    return [
        ExpiringDocumentResponse(
            id=doc.id,
            employee_id=doc.employee_id,
            document_type_id=doc.document_type_id,
            document_type_name=doc.document_type.name,
            expiry_date=doc.expiry_date,
            days_until_expiry=days,
            reminder_type=kind,
        )
        for doc, days, kind in rows
    ]


@router.get("/employees/{employee_id}/documents/calendar")
async def expiry_calendar(
    employee_id: str,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    ics_data = expiry_service.expiry_calendar(db, ctx.company_id, employee_id)
    return Response(
        content=ics_data,
        media_type="text/calendar",
        headers={"Content-Disposition": f'attachment; filename="expiry_{employee_id[:8]}.ics"'},
    )


@router.get("/documents/export.csv")
async def export_documents(
    folder_id: str | None = None,
    document_type_id: str | None = None,
    employee_id: str | None = None,
    is_active: bool | None = None,
    from_date: str | None = None,
    to_date: str | None = None,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    docs = folder_service.documents_in_folder(
        db, ctx.company_id,
        folder_id=folder_id, document_type_id=document_type_id, employee_id=employee_id,
        is_active=is_active, from_date=from_date, to_date=to_date,
    )
    return Response(
        content=folder_service.export_documents_csv(docs),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="documents.csv"'},
    )


@router.get("/documents/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: str,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    return doc_to_response(lifecycle_service.get_document(db, ctx.company_id, document_id))


@router.put("/documents/{document_id}", response_model=DocumentResponse)
async def update_document(
    document_id: str,
    req: DocumentUpdate,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    doc = lifecycle_service.update_document(db, ctx.company_id, document_id, ctx.user_id, req)
    return doc_to_response(doc)


@router.delete("/documents/{document_id}")
async def delete_document(
    document_id: str,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    lifecycle_service.delete_document(db, ctx.company_id, document_id, ctx.user_id)
    return {"message": "Document deleted"}


@router.post("/documents/{document_id}/not-applicable", response_model=DocumentResponse)
async def mark_not_applicable(
    document_id: str,
    req: MarkNotApplicableRequest,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    doc = lifecycle_service.mark_not_applicable(db, ctx.company_id, document_id, ctx.user_id, req.reason)
    return doc_to_response(doc)
