"""Request/response schemas for the presign and delete endpoints."""
from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr


class PresignRequest(BaseModel):
    """Request schema for presigned URL generation."""
    model_config = ConfigDict(populate_by_name=True)

    filename: StrictStr = Field(..., min_length=1, description="Original file name")
    content_type: StrictStr = Field(..., alias="contentType", min_length=1, description="MIME type")
    size: StrictInt = Field(..., ge=0, description="File size in bytes")


class PresignResponse(BaseModel):
    """Response schema for presigned URL."""
    model_config = ConfigDict(populate_by_name=True)

    presigned_url: str = Field(..., alias="presignedUrl", description="Presigned PUT URL")
    key: str = Field(..., description="Object key in storage bucket")


class DeleteRequest(BaseModel):
    key: StrictStr = Field(..., min_length=1, description="Object key to delete")


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
