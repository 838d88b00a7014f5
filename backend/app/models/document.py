from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from app.database import Base


class Document(Base):
    __tablename__ = "documents"

    id = Column(Text, primary_key=True)
    leave_request_id = Column(Text, ForeignKey("leave_requests.id"), nullable=False)
    external_media_id = Column(Text, nullable=False, unique=True)
    external_media_url = Column(Text, nullable=False)
    external_resource_type = Column(Text)
    file_name = Column(Text)
    mime_type = Column(Text)
    file_size_bytes = Column(Integer)
    uploaded_by_id = Column(Text, ForeignKey("users.id"), nullable=False)
    created_at = Column(Text, nullable=False)

    leave_request = relationship("LeaveRequest", back_populates="documents")
