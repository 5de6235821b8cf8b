from pydantic import BaseModel, Field


class FolderCreate(BaseModel):
    folder_name: str = Field(min_length=1)
    folder_description: str | None = None
    display_order: int = 0


class FolderResponse(BaseModel):
    id: str
    folder_name: str
    folder_description: str | None
    display_order: int
    is_system_folder: bool
    is_active: bool
    document_count: int = 0


class DocumentTypeCount(BaseModel):
    id: str
    code: str
    name: str
    folder_id: str
    display_order: int
    is_active: bool
    file_count: int


class SeedResponse(BaseModel):
    folders_created: int
    document_types_created: int
    skipped: bool
