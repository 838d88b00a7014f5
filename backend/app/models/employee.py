from sqlalchemy import Column, ForeignKey, Text
from sqlalchemy.orm import relationship
from app.database import Base


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Text, primary_key=True)
    user_id = Column(Text, ForeignKey("users.id"), nullable=False, unique=True)
    position = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="ACTIVE")
    created_at = Column(Text, nullable=False)

    user = relationship("User", back_populates="employee")
    leave_requests = relationship("LeaveRequest", back_populates="employee")
