from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hrdocs.database import get_db
from hrdocs.dependencies import RequestContext, get_request_context
from hrdocs.models.document_type import DocumentField, DocumentType
from hrdocs.schemas.document_type import (
    DocumentTypeCreate,
    DocumentTypeResponse,
    DocumentTypeUpdate,
    FieldCreate,
    FieldResponse,
    FieldUpdate,
)
from hrdocs.services import document_type_service, folder_service
from hrdocs.services.policy import policy_for

router = APIRouter(prefix="/document-types", tags=["document-types"])


def field_to_response(field: DocumentField) -> FieldResponse:
    return FieldResponse(
        id=field.id,
        document_type_id=field.document_type_id,
        field_name=field.field_name,
        field_label=field.field_label,
        field_type=field.field_type,
        field_values=field.field_values,
        placeholder=field.placeholder,
        default_value=field.default_value,
        validation_rules=field.validation_rules,
        is_required=field.is_required,
        is_readonly=field.is_readonly,
        is_visible=field.is_visible,
        display_order=field.display_order,
        help_text=field.help_text,
    )


def _type_to_response(doc_type: DocumentType, document_count: int = 0) -> DocumentTypeResponse:
    return DocumentTypeResponse(
        id=doc_type.id,
        company_id=doc_type.company_id,
        folder_id=doc_type.folder_id,
        code=doc_type.code,
        name=doc_type.name,
        description=doc_type.description,
        allow_single=doc_type.allow_single,
        allow_multiple=doc_type.allow_multiple,
        cardinality=policy_for(doc_type).value,
        is_mandatory=doc_type.is_mandatory,
        allow_not_applicable=doc_type.allow_not_applicable,
        require_expiry_date=doc_type.require_expiry_date,
        allowed_file_types=doc_type.allowed_file_types,
        max_file_size_mb=doc_type.max_file_size_mb,
        display_order=doc_type.display_order,
        is_system_type=doc_type.is_system_type,
        is_active=doc_type.is_active,
        created_at=doc_type.created_at,
        updated_at=doc_type.updated_at,
        fields=[field_to_response(f) for f in doc_type.fields],
        document_count=document_count,
    )


@router.post("", response_model=DocumentTypeResponse, status_code=201)
async def create_document_type(
    req: DocumentTypeCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    doc_type = document_type_service.create_type(db, ctx.company_id, ctx.user_id, req)
    return _type_to_response(doc_type)


@router.get("", response_model=list[DocumentTypeResponse])
async def list_document_types(
    folder_id: str | None = None,
    is_active: bool | None = None,
    search: str | None = None,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    rows = folder_service.types_in_folder_with_counts(
        db, ctx.company_id, folder_id=folder_id, is_active=is_active, search=search
    )
    return [_type_to_response(t, count) for t, count in rows]


@router.get("/{type_id}", response_model=DocumentTypeResponse)
async def get_document_type(
    type_id: str,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    doc_type = document_type_service.get_type(db, ctx.company_id, type_id)
    return _type_to_response(doc_type, document_type_service.active_document_count(db, doc_type))


@router.put("/{type_id}", response_model=DocumentTypeResponse)
async def update_document_type(
    type_id: str,
    req: DocumentTypeUpdate,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    doc_type = document_type_service.update_type(db, ctx.company_id, type_id, ctx.user_id, req)
    return _type_to_response(doc_type, document_type_service.active_document_count(db, doc_type))


@router.delete("/{type_id}")
async def delete_document_type(
    type_id: str,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    document_type_service.delete_type(db, ctx.company_id, type_id, ctx.user_id)
    return {"message": "Document type deleted"}


@router.post("/{type_id}/fields", response_model=FieldResponse, status_code=201)
async def add_field(
    type_id: str,
    req: FieldCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    field = document_type_service.add_field(db, ctx.company_id, type_id, req)
    return field_to_response(field)


@router.put("/{type_id}/fields/{field_id}", response_model=FieldResponse)
async def update_field(
    type_id: str,
    field_id: str,
    req: FieldUpdate,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    field = document_type_service.update_field(db, ctx.company_id, type_id, field_id, req)
    return field_to_response(field)


@router.delete("/{type_id}/fields/{field_id}")
async def delete_field(
    type_id: str,
    field_id: str,
    cascade_values: bool = False,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    document_type_service.delete_field(db, ctx.company_id, type_id, field_id, cascade_values=cascade_values)
    return {"message": "Field deleted"}
