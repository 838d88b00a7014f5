from sqlalchemy import Column, Text
from sqlalchemy.orm import relationship
from app.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Text, primary_key=True)
    email = Column(Text, nullable=False, unique=True)
    password_hash = Column(Text)
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    role = Column(Text, nullable=False, default="EMPLOYEE")
    status = Column(Text, nullable=False, default="PENDING")
    profile_picture_url = Column(Text)
    created_at = Column(Text, nullable=False)

    employee = relationship("Employee", back_populates="user", uselist=False)
