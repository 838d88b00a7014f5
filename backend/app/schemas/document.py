from pydantic import BaseModel


class LeaveRequestSummary(BaseModel):
    id: str
    employee_id: str
    start_date: str
    end_date: str
    status: str


class DocumentResponse(BaseModel):
    id: str
    leave_request_id: str
    external_media_id: str
    external_media_url: str
    external_resource_type: str | None
    file_name: str | None
    mime_type: str | None
    file_size_bytes: int | None
    uploaded_by_id: str
    created_at: str
    leave_request: LeaveRequestSummary | None = None


class DocumentEnvelope(BaseModel):
    success: bool = True
    message: str | None = None
    data: DocumentResponse


class DocumentListEnvelope(BaseModel):
    success: bool = True
    data: list[DocumentResponse]


class ThumbnailData(BaseModel):
    url: str


class ThumbnailEnvelope(BaseModel):
    success: bool = True
    data: ThumbnailData


class ActionEnvelope(BaseModel):
    success: bool = True
    message: str
