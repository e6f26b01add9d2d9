from sqlalchemy import Column, String, Text, Integer, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from doceditor.db.base import BaseModel


class Document(BaseModel):
    __tablename__ = "documents"

    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False, default="")
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.uuid", ondelete="CASCADE"), nullable=False, index=True)
    permission = Column(String(20), nullable=False, default="owner")

    # Relationships
    owner = relationship("User", back_populates="owned_documents")
    versions = relationship("DocumentVersion", back_populates="document", cascade="all, delete-orphan")


class DocumentVersion(BaseModel):
    __tablename__ = "document_versions"
    # Номер версии уникален в пределах документа
    __table_args__ = (
        UniqueConstraint("document_id", "version_number", name="uq_document_versions_number"),
    )

    document_id = Column(Uuid(as_uuid=True), ForeignKey("documents.uuid", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    version_number = Column(Integer, nullable=False)
    change_description = Column(String(255), nullable=False)
    created_by = Column(Uuid(as_uuid=True), ForeignKey("users.uuid"), nullable=False)

    # Relationships
    document = relationship("Document", back_populates="versions")
    creator = relationship("User")
