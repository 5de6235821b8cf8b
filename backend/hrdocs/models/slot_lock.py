from sqlalchemy import Column, Integer, Table, Text

from hrdocs.database import Base

# One row per (company, employee, type); upserted to serialize slot checks.
document_slot_locks = Table(
    "document_slot_locks",
    Base.metadata,
    Column("company_id", Text, primary_key=True),
    Column("employee_id", Text, primary_key=True),
    Column("document_type_id", Text, primary_key=True),
    Column("version", Integer, nullable=False),
    Column("updated_at", Text, nullable=False),
)
