"""
Typed field values of an employee document.

Writes are always a full replace: every existing value row of the document is
dropped and the submitted set inserted. A partial list therefore removes the
fields it leaves out, so callers must send the complete set every time.
"""
from sqlalchemy.orm import Session

from hrdocs.errors import ValidationFailed
from hrdocs.models.document_type import DocumentField
from hrdocs.models.employee_document import EmployeeDocument, EmployeeDocumentFieldValue
from hrdocs.schemas.document import FieldValueIn
from hrdocs.services.field_schema import validate_field_value
from hrdocs.utils.ids import new_id


def validate_values(
    db: Session,
    document_type_id: str,
    values: list[FieldValueIn],
    enforce_required: bool = True,
) -> list[tuple[DocumentField, str | None]]:
    """Check a submitted value set against the type's field schema."""
    fields = {
        f.id: f
        for f in db.query(DocumentField).filter(DocumentField.document_type_id == document_type_id).all()
    }

    validated: list[tuple[DocumentField, str | None]] = []
    seen: set[str] = set()
    for item in values:
        field = fields.get(item.field_id)
        if field is None:
            raise ValidationFailed(
                "InvalidFieldReference",
                f"Field '{item.field_id}' does not belong to this document type",
            )
        if item.field_id in seen:
            raise ValidationFailed(
                "InvalidFieldValue", f"Field '{field.field_name}' was submitted more than once"
            )
        seen.add(item.field_id)
        if field.is_readonly:
            raise ValidationFailed("InvalidFieldValue", f"Field '{field.field_name}' is read-only")
        validated.append((field, validate_field_value(field, item.field_value)))

    if enforce_required:
        present = {field.id for field, value in validated if value is not None}
        missing = [
            f.field_name for f in fields.values()
            if f.is_required and not f.is_readonly and f.id not in present
        ]
        if missing:
            raise ValidationFailed(
                "RequiredFieldMissing", f"Missing required fields: {', '.join(sorted(missing))}"
            )
    return validated


def set_values(
    db: Session,
    document: EmployeeDocument,
    values: list[FieldValueIn],
    replace: bool = True,
) -> list[EmployeeDocumentFieldValue]:
    """Validate and store a document's field values inside the caller's transaction."""
    validated = validate_values(
        db, document.document_type_id, values,
        enforce_required=not document.is_not_applicable,
    )

    if replace:
        db.query(EmployeeDocumentFieldValue).filter(
            EmployeeDocumentFieldValue.employee_document_id == document.id
        ).delete(synchronize_session=False)
        db.expire(document, ["field_values"])

    rows = [
        EmployeeDocumentFieldValue(
            id=new_id(),
            employee_document_id=document.id,
            field_id=field.id,
            field_value=value,
        )
        for field, value in validated
    ]
    db.add_all(rows)
    db.flush()
    return rows
