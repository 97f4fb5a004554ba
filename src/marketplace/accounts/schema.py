"""Schema for accounts module."""

import re
import typing as t
from datetime import datetime
from enum import StrEnum

from pydantic import AliasChoices, EmailStr, Field, HttpUrl, field_validator, model_validator

from marketplace.common.schema import NameString, Schema, StrippedString


class UserRole(StrEnum):
    CUSTOMER = "CUSTOMER"
    SELLER = "SELLER"
    MANAGER = "MANAGER"
    SUPER_ADMIN = "SUPER_ADMIN"


class ApplicationStatus(StrEnum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ManagerStatus(StrEnum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    PENDING_INVITE = "PENDING_INVITE"
    INVITE_EXPIRED = "INVITE_EXPIRED"


BusinessType = t.Literal["individual", "company", "organization", "other"]


class UserCounts(Schema):
    bookings: int = 0
    campaigns: int = 0


class User(Schema):
    # Some endpoints still answer with the Mongo-style `_id`.
    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    email: str
    first_name: str = ""
    last_name: str = ""
    phone: str | None = None
    date_of_birth: str | None = None
    profile_picture: str | None = None
    role: UserRole = UserRole.CUSTOMER
    application_status: ApplicationStatus | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None
    counts: UserCounts | None = Field(default=None, alias="_count")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_seller(self) -> bool:
        return self.role == UserRole.SELLER


class AuthPayload(Schema):
    user: User


def validate_password_strength(password: str) -> str:
    """Require at least 8 characters with an uppercase letter, a lowercase letter and a digit."""
    if len(password) < 8:
        raise ValueError("Password must be at least 8 characters")
    if not re.search(r"[A-Z]", password):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        raise ValueError("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", password):
        raise ValueError("Password must contain at least one number")
    return password


class LoginCredentials(Schema):
    email: EmailStr
    password: str = Field(..., min_length=6)
    remember_me: bool | None = None


class RegisterData(Schema):
    email: EmailStr
    password: str
    first_name: NameString
    last_name: NameString
    phone: StrippedString | None = None
    date_of_birth: str | None = None
    role: t.Literal["CUSTOMER"] = "CUSTOMER"

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        return validate_password_strength(value)


class RegisterForm(RegisterData):
    """Registration as entered by the user, with confirmation and terms."""

    confirm_password: str
    terms: bool = False

    @model_validator(mode="after")
    def passwords_match_and_terms_accepted(self) -> t.Self:
        """Validate that the passwords match and the terms were accepted."""
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match")
        if not self.terms:
            raise ValueError("You must accept the terms and conditions")
        return self

    def to_register_data(self) -> RegisterData:
        return RegisterData.model_validate(self.model_dump(exclude={"confirm_password", "terms"}))


class SocialMediaHandles(Schema):
    facebook: str | None = None
    twitter: str | None = None
    instagram: str | None = None


class SellerApplicationData(Schema):
    business_name: NameString
    business_type: BusinessType
    business_address: t.Annotated[str, Field(min_length=5)]
    business_phone: t.Annotated[str, Field(min_length=10)]
    business_email: EmailStr
    tax_id: str | None = None
    business_documents: list[str] | None = None
    description: str | None = None
    website_url: HttpUrl | t.Literal[""] | None = None
    social_media_handles: SocialMediaHandles | None = None


class NewSellerApplicationData(RegisterData, SellerApplicationData):
    """Seller application submitted together with account registration."""


class SellerApplicationResult(Schema):
    user: User
    application: dict[str, t.Any] | None = None


class ApplicationStatusResponse(Schema):
    application_status: str | None = None
    seller_application: dict[str, t.Any] | None = None


class Manager(Schema):
    id: str
    name: str
    email: str
    phone: str | None = None
    is_active: bool = True
    status: ManagerStatus = ManagerStatus.PENDING_INVITE
    permissions: list[str] = Field(default_factory=list)
    last_active_at: datetime | None = None
    created_at: datetime | None = None
    invitation_expiry: datetime | None = None


class CreateManagerData(Schema):
    name: NameString
    email: EmailStr
    phone: str | None = None
    permissions: list[str] | None = None


class ManagerListResponse(Schema):
    managers: list[Manager] = Field(default_factory=list)
    count: int = 0


class CreateManagerResponse(Schema):
    manager_id: str
    name: str
    email: str


class DeactivateManagerResponse(Schema):
    manager_id: str
    is_active: bool
