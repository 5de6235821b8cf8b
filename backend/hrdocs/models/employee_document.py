from sqlalchemy import Boolean, Column, Float, ForeignKey, Text
from sqlalchemy.orm import relationship
from hrdocs.database import Base


class EmployeeDocument(Base):
    __tablename__ = "employee_documents"

    id = Column(Text, primary_key=True)
    company_id = Column(Text, nullable=False)
    employee_id = Column(Text, nullable=False)
    document_type_id = Column(Text, ForeignKey("document_types.id"), nullable=False)
    folder_id = Column(Text, nullable=False)
    document_number = Column(Text)
    document_description = Column(Text)
    file_name = Column(Text)
    file_path = Column(Text)
    file_size_kb = Column(Float)
    file_type = Column(Text)
    file_extension = Column(Text)
    issue_date = Column(Text)
    expiry_date = Column(Text)
    is_not_applicable = Column(Boolean, nullable=False, default=False)
    not_applicable_reason = Column(Text)
    is_active = Column(Boolean, nullable=False, default=True)
    uploaded_by = Column(Text, nullable=False)
    updated_by = Column(Text)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    document_type = relationship("DocumentType")
    field_values = relationship(
        "EmployeeDocumentFieldValue",
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def counts_toward_slot(self) -> bool:
        """Active, non-NA documents are the ones the cardinality policy limits."""
        return bool(self.is_active) and not self.is_not_applicable


class EmployeeDocumentFieldValue(Base):
    __tablename__ = "employee_document_field_values"

    id = Column(Text, primary_key=True)
    employee_document_id = Column(
        Text, ForeignKey("employee_documents.id", ondelete="CASCADE"), nullable=False
    )
    field_id = Column(Text, nullable=False)
    field_value = Column(Text)

    document = relationship("EmployeeDocument", back_populates="field_values")
