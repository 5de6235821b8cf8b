from typing import Any

from pydantic import BaseModel, Field


class FieldCreate(BaseModel):
    field_name: str = Field(min_length=1)
    field_label: str = Field(min_length=1)
    field_type: str
    field_values: list[str] | None = None
    placeholder: str | None = None
    default_value: str | None = None
    validation_rules: dict[str, Any] | None = None
    is_required: bool = False
    is_readonly: bool = False
    is_visible: bool = True
    display_order: int | None = None
    help_text: str | None = None


class FieldUpdate(BaseModel):
    # field_name is deliberately absent: names are fixed once created
    field_label: str | None = None
    field_type: str | None = None
    field_values: list[str] | None = None
    placeholder: str | None = None
    default_value: str | None = None
    validation_rules: dict[str, Any] | None = None
    is_required: bool | None = None
    is_readonly: bool | None = None
    is_visible: bool | None = None
    display_order: int | None = None
    help_text: str | None = None


class FieldResponse(BaseModel):
    id: str
    document_type_id: str
    field_name: str
    field_label: str
    field_type: str
    field_values: list[str] | None
    placeholder: str | None
    default_value: str | None
    validation_rules: dict[str, Any] | None
    is_required: bool
    is_readonly: bool
    is_visible: bool
    display_order: int
    help_text: str | None


class DocumentTypeCreate(BaseModel):
    folder_id: str
    code: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str | None = None
    allow_single: bool = True
    allow_multiple: bool = False
    is_mandatory: bool = False
    allow_not_applicable: bool = False
    require_expiry_date: bool = False
    allowed_file_types: str | None = None
    max_file_size_mb: float | None = Field(default=None, gt=0)
    display_order: int = 0
    is_system_type: bool = False
    fields: list[FieldCreate] = []


class DocumentTypeUpdate(BaseModel):
    folder_id: str | None = None
    code: str | None = None
    name: str | None = None
    description: str | None = None
    allow_single: bool | None = None
    allow_multiple: bool | None = None
    is_mandatory: bool | None = None
    allow_not_applicable: bool | None = None
    require_expiry_date: bool | None = None
    allowed_file_types: str | None = None
    max_file_size_mb: float | None = Field(default=None, gt=0)
    display_order: int | None = None
    is_active: bool | None = None


class DocumentTypeResponse(BaseModel):
    id: str
    company_id: str
    folder_id: str
    code: str
    name: str
    description: str | None
    allow_single: bool
    allow_multiple: bool
    cardinality: str
    is_mandatory: bool
    allow_not_applicable: bool
    require_expiry_date: bool
    allowed_file_types: str
    max_file_size_mb: float
    display_order: int
    is_system_type: bool
    is_active: bool
    created_at: str
    updated_at: str
    fields: list[FieldResponse] = []
    document_count: int = 0
