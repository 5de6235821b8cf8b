from sqlalchemy import Boolean, Column, Integer, Text
from sqlalchemy.orm import relationship
from hrdocs.database import Base


class DocumentFolder(Base):
    __tablename__ = "document_folders"

    id = Column(Text, primary_key=True)
    company_id = Column(Text, nullable=False)
    folder_name = Column(Text, nullable=False)
    folder_description = Column(Text)
    display_order = Column(Integer, nullable=False, default=0)
    is_system_folder = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_by = Column(Text, nullable=False)
    updated_by = Column(Text)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    document_types = relationship("DocumentType", back_populates="folder")
