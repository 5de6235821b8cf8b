from typing import Any

from pydantic import BaseModel, Field

from hrdocs.schemas.document_type import FieldResponse


class FieldValueIn(BaseModel):
    field_id: str
    field_value: Any = None


class DocumentCreate(BaseModel):
    document_type_id: str
    document_number: str | None = None
    document_description: str | None = None
    file_name: str | None = None
    file_path: str | None = None
    file_size_kb: float | None = Field(default=None, ge=0)
    file_type: str | None = None
    file_extension: str | None = None
    issue_date: str | None = None
    expiry_date: str | None = None
    is_not_applicable: bool = False
    not_applicable_reason: str | None = None
    # Complete set of values; omitted fields are stored as absent.
    field_values: list[FieldValueIn] = []


class DocumentUpdate(BaseModel):
    document_number: str | None = None
    document_description: str | None = None
    issue_date: str | None = None
    expiry_date: str | None = None
    is_not_applicable: bool | None = None
    not_applicable_reason: str | None = None
    is_active: bool | None = None
    # None leaves values untouched; a list (even empty) replaces all of them.
    field_values: list[FieldValueIn] | None = None


class MarkNotApplicableRequest(BaseModel):
    reason: str | None = None


class FieldValueResponse(BaseModel):
    field_id: str
    field_name: str | None
    field_label: str | None
    field_type: str | None
    field_value: str | None


class DocumentTypeSummary(BaseModel):
    id: str
    code: str
    name: str
    require_expiry_date: bool
    fields: list[FieldResponse] = []


class DocumentResponse(BaseModel):
    id: str
    company_id: str
    employee_id: str
    document_type_id: str
    folder_id: str
    document_number: str | None
    document_description: str | None
    file_name: str | None
    file_path: str | None
    file_size_kb: float | None
    file_type: str | None
    file_extension: str | None
    issue_date: str | None
    expiry_date: str | None
    is_not_applicable: bool
    not_applicable_reason: str | None
    is_active: bool
    uploaded_by: str
    updated_by: str | None
    created_at: str
    updated_at: str
    document_type: DocumentTypeSummary | None = None
    field_values: list[FieldValueResponse] = []


class ExpiringDocumentResponse(BaseModel):
    id: str
    employee_id: str
    document_type_id: str
    document_type_name: str
    expiry_date: str
    days_until_expiry: int
    reminder_type: str
