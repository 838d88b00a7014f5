from app.models.user import User
from app.models.employee import Employee
from app.models.leave_request import LeaveRequest
from app.models.document import Document

__all__ = ["User", "Employee", "LeaveRequest", "Document"]
