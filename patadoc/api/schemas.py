from pydantic import BaseModel, Field


class SignupResponse(BaseModel):
    """Response for a successful signup."""

    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Error response."""

    error: str = Field(..., description="Plain-language message")
    code: str = Field(..., description="Machine-readable error code")
