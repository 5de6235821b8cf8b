from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hrdocs.database import atomic, get_db
from hrdocs.dependencies import RequestContext, get_request_context
from hrdocs.models.folder import DocumentFolder
from hrdocs.routers.employee_documents import doc_to_response
from hrdocs.schemas.document import DocumentResponse
from hrdocs.schemas.folder import DocumentTypeCount, FolderCreate, FolderResponse, SeedResponse
from hrdocs.services import folder_service, seed_service

router = APIRouter(tags=["folders"])


def _folder_to_response(folder: DocumentFolder, document_count: int = 0) -> FolderResponse:
    return FolderResponse(
        id=folder.id,
        folder_name=folder.folder_name,
        folder_description=folder.folder_description,
        display_order=folder.display_order,
        is_system_folder=folder.is_system_folder,
        is_active=folder.is_active,
        document_count=document_count,
    )


@router.get("/folders", response_model=list[FolderResponse])
async def list_folders(
    employee_id: str | None = None,
    is_active: bool | None = None,
    search: str | None = None,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    rows = folder_service.list_folders_with_counts(
        db, ctx.company_id, employee_id=employee_id, is_active=is_active, search=search
    )
    return [_folder_to_response(f, count) for f, count in rows]


@router.post("/folders", response_model=FolderResponse, status_code=201)
async def create_folder(
    req: FolderCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    with atomic(db):
        folder = folder_service.create_folder(
            db, ctx.company_id, ctx.user_id,
            folder_name=req.folder_name,
            folder_description=req.folder_description,
            display_order=req.display_order,
        )
    db.refresh(folder)
    return _folder_to_response(folder)


@router.get("/folders/{folder_id}/document-types", response_model=list[DocumentTypeCount])
async def folder_document_types(
    folder_id: str,
    employee_id: str | None = None,
    is_active: bool | None = None,
    search: str | None = None,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    rows = folder_service.types_in_folder_with_counts(
        db, ctx.company_id, folder_id=folder_id,
        employee_id=employee_id, is_active=is_active, search=search,
    )
    return [
        DocumentTypeCount(
            id=t.id,
            code=t.code,
            name=t.name,
            folder_id=t.folder_id,
            display_order=t.display_order,
            is_active=t.is_active,
            file_count=count,
        )
        for t, count in rows
    ]


@router.get("/folders/{folder_id}/documents", response_model=list[DocumentResponse])
async def folder_documents(
    folder_id: str,
    document_type_id: str | None = None,
    employee_id: str | None = None,
    is_active: bool | None = None,
    from_date: str | None = None,
    to_date: str | None = None,
    search: str | None = None,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    folder_service.get_folder(db, ctx.company_id, folder_id)
    docs = folder_service.documents_in_folder(
        db, ctx.company_id,
        folder_id=folder_id, document_type_id=document_type_id, employee_id=employee_id,
        is_active=is_active, from_date=from_date, to_date=to_date, search=search,
    )
    return [doc_to_response(d) for d in docs]


@router.post("/seed", response_model=SeedResponse)
async def seed_structure(
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    return seed_service.seed_default_structure(db, ctx.company_id, ctx.user_id)
