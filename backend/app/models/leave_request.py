from sqlalchemy import Column, ForeignKey, Text
from sqlalchemy.orm import relationship
from app.database import Base


class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    id = Column(Text, primary_key=True)
    employee_id = Column(Text, ForeignKey("employees.id"), nullable=False)
    start_date = Column(Text, nullable=False)
    end_date = Column(Text, nullable=False)
    reason = Column(Text)
    status = Column(Text, nullable=False, default="PENDING")
    created_at = Column(Text, nullable=False)

    employee = relationship("Employee", back_populates="leave_requests")
    documents = relationship("Document", back_populates="leave_request")
