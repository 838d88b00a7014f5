from pydantic import BaseModel


class UploadSignatureResponse(BaseModel):
    signature: str
    timestamp: int
    api_key: str
    cloud_name: str
    folder: str


class UploadSignatureEnvelope(BaseModel):
    success: bool = True
    data: UploadSignatureResponse
