"""Admin authentication schemas."""

from pydantic import BaseModel, EmailStr, Field, TypeAdapter


class AdminLoginSchema(BaseModel):
    """Schema for admin login"""
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=200)


# Same rule AdminLoginSchema applies, for accounts created outside a request
admin_email_adapter = TypeAdapter(EmailStr)
