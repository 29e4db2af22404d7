"""
Primary Invitation Schemas
Pydantic models for request validation

Client form payloads keep the camelCase keys the form posts.
"""
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, EmailStr, Field, field_validator

EntityType = Literal["", "LLP", "LLC", "Startup", "Pvt Ltd", "Other"]


class SendInvitationSchema(BaseModel):
    """Schema for sending one invitation"""
    email: EmailStr = Field(..., description="Recipient email address")
    adminName: Optional[str] = Field(None, max_length=150, description="Name shown in the email; defaults to the signed-in admin")

    class Config:
        json_schema_extra = {
            "example": {
                "email": "founder@acme.example",
                "adminName": "Priya",
            }
        }


class SendBulkSchema(BaseModel):
    """Schema for sending invitations to several recipients"""
    emails: List[EmailStr] = Field(..., min_length=1, max_length=100)
    adminName: Optional[str] = Field(None, max_length=150)

    @field_validator('emails')
    @classmethod
    def dedupe_emails(cls, v):
        seen = []
        for email in v:
            normalized = email.strip().lower()
            if normalized not in seen:
                seen.append(normalized)
        return seen


class ResendInvitationSchema(BaseModel):
    """Schema for resending the latest invitation for an email"""
    email: EmailStr
    adminName: Optional[str] = Field(None, max_length=150)


class DocumentDescriptorSchema(BaseModel):
    publicId: Optional[str] = None
    url: Optional[str] = None
    secureUrl: Optional[str] = None
    originalFilename: Optional[str] = None
    bytes: Optional[int] = None
    format: Optional[str] = None
    uploadedAt: Optional[str] = None


class CompanyInfoSchema(BaseModel):
    name: Optional[str] = Field(None, max_length=300)
    address: Optional[str] = Field(None, max_length=1000)
    pinCode: Optional[str] = Field(None, max_length=20)
    gstNumber: Optional[str] = Field(None, max_length=30)
    gstCertificate: Optional[DocumentDescriptorSchema] = None
    entityType: Optional[EntityType] = None
    entityCertificate: Optional[DocumentDescriptorSchema] = None


class ApplicantInfoSchema(BaseModel):
    name: Optional[str] = Field(None, max_length=300)
    address: Optional[str] = Field(None, max_length=1000)
    pinCode: Optional[str] = Field(None, max_length=20)
    sameAsCompany: Optional[bool] = None


class InventorSchema(BaseModel):
    name: str = Field("", max_length=300)
    address: str = Field("", max_length=1000)
    pinCode: str = Field("", max_length=20)
    nationality: str = Field("", max_length=100)


class InvitationFormSchema(BaseModel):
    """Draft or final answers posted by the client"""
    companyInfo: Optional[CompanyInfoSchema] = None
    applicantInfo: Optional[ApplicantInfoSchema] = None
    inventors: Optional[List[InventorSchema]] = Field(None, max_length=50)
    comments: Optional[str] = Field(None, max_length=2000)

    def to_payload(self) -> dict:
        """Only the keys the client actually sent."""
        return self.model_dump(exclude_unset=True)


class UploadFileSchema(BaseModel):
    data: str = Field(..., min_length=1, description="Base64 content, optionally as a data: URL")
    name: str = Field(..., min_length=1, max_length=255)
    type: Optional[str] = Field(None, max_length=100)


class UploadDocumentSchema(BaseModel):
    """Schema for a document upload from the client form"""
    fieldName: str
    file: UploadFileSchema


class ListInvitationsQuerySchema(BaseModel):
    status: Optional[Literal["pending", "draft", "completed"]] = None
    limit: int = Field(50, ge=1, le=100)


class CompletedQuerySchema(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)
    search: Optional[str] = Field(None, max_length=200)


# Admin edits: one variant per editable path


class CompanyTextChange(BaseModel):
    field: Literal["companyInfo.name", "companyInfo.address", "companyInfo.pinCode", "companyInfo.gstNumber"]
    value: str = Field(..., max_length=1000)


class EntityTypeChange(BaseModel):
    field: Literal["companyInfo.entityType"]
    value: EntityType


class ApplicantTextChange(BaseModel):
    field: Literal["applicantInfo.name", "applicantInfo.address", "applicantInfo.pinCode"]
    value: str = Field(..., max_length=1000)


class ApplicantSameAsCompanyChange(BaseModel):
    field: Literal["applicantInfo.sameAsCompany"]
    value: bool


class InventorsChange(BaseModel):
    field: Literal["inventors"]
    value: List[InventorSchema] = Field(..., max_length=50)


class CommentsChange(BaseModel):
    field: Literal["comments"]
    value: str = Field(..., max_length=2000)


AdminFieldChange = Annotated[
    Union[
        CompanyTextChange,
        EntityTypeChange,
        ApplicantTextChange,
        ApplicantSameAsCompanyChange,
        InventorsChange,
        CommentsChange,
    ],
    Field(discriminator="field"),
]


class AdminEditSchema(BaseModel):
    """Schema for an admin editing a submission"""
    changes: List[AdminFieldChange] = Field(..., min_length=1)

    class Config:
        json_schema_extra = {
            "example": {
                "changes": [
                    {"field": "companyInfo.gstNumber", "value": "27AAACA1234A1Z5"},
                    {"field": "comments", "value": "Verified with client by phone"},
                ]
            }
        }
