from sqlalchemy import Boolean, Column, Float, ForeignKey, Integer, JSON, Text
from sqlalchemy.orm import relationship
from hrdocs.database import Base


class DocumentType(Base):
    __tablename__ = "document_types"

    id = Column(Text, primary_key=True)
    company_id = Column(Text, nullable=False)
    folder_id = Column(Text, ForeignKey("document_folders.id"), nullable=False)
    code = Column(Text, nullable=False)
    name = Column(Text, nullable=False)
    description = Column(Text)
    allow_single = Column(Boolean, nullable=False, default=True)
    allow_multiple = Column(Boolean, nullable=False, default=False)
    is_mandatory = Column(Boolean, nullable=False, default=False)
    allow_not_applicable = Column(Boolean, nullable=False, default=False)
    require_expiry_date = Column(Boolean, nullable=False, default=False)
    allowed_file_types = Column(Text, nullable=False)
    max_file_size_mb = Column(Float, nullable=False)
    display_order = Column(Integer, nullable=False, default=0)
    is_system_type = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_by = Column(Text, nullable=False)
    updated_by = Column(Text)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    folder = relationship("DocumentFolder", back_populates="document_types")
    fields = relationship(
        "DocumentField",
        back_populates="document_type",
        cascade="all, delete-orphan",
        order_by="DocumentField.display_order",
    )

    @property
    def extensions(self) -> set[str]:
        return {
            ext.strip().lower().lstrip(".")
            for ext in (self.allowed_file_types or "").split(",")
            if ext.strip()
        }


class DocumentField(Base):
    __tablename__ = "document_type_fields"

    id = Column(Text, primary_key=True)
    document_type_id = Column(Text, ForeignKey("document_types.id", ondelete="CASCADE"), nullable=False)
    field_name = Column(Text, nullable=False)
    field_label = Column(Text, nullable=False)
    field_type = Column(Text, nullable=False)
    field_values = Column(JSON)
    placeholder = Column(Text)
    default_value = Column(Text)
    validation_rules = Column(JSON)
    is_required = Column(Boolean, nullable=False, default=False)
    is_readonly = Column(Boolean, nullable=False, default=False)
    is_visible = Column(Boolean, nullable=False, default=True)
    display_order = Column(Integer, nullable=False, default=0)
    help_text = Column(Text)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    document_type = relationship("DocumentType", back_populates="fields")
