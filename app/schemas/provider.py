from typing import Optional

from pydantic import EmailStr, Field, model_validator
from pydantic.alias_generators import to_camel

from app.schemas.base import BaseSchema, TimestampedSchema
from app.schemas.enums import ProviderCategory
from app.schemas.media import ProviderMedia


class ProviderProfile(BaseSchema):
    name: str = Field(..., min_length=1)
    email: EmailStr
    category: ProviderCategory
    min_price: int = Field(..., ge=0)
    max_price: int = Field(..., ge=0)
    country: str
    city: str
    postal_code: str
    street: str
    house_number: str
    phone_number: Optional[str] = None
    instagram: Optional[str] = None
    facebook: Optional[str] = None
    tiktok: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True

    @model_validator(mode="after")
    def _check_price_range(self):
        if self.min_price > self.max_price:
            raise ValueError("minPrice must not exceed maxPrice")
        return self


class ProviderCreateRequest(ProviderProfile):
    media: ProviderMedia = Field(default_factory=ProviderMedia)


class ProviderUpdateRequest(BaseSchema):
    # media is never writable here; it goes through the media endpoints
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    category: Optional[ProviderCategory] = None
    min_price: Optional[int] = Field(None, ge=0)
    max_price: Optional[int] = Field(None, ge=0)
    country: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    street: Optional[str] = None
    house_number: Optional[str] = None
    phone_number: Optional[str] = None
    instagram: Optional[str] = None
    facebook: Optional[str] = None
    tiktok: Optional[str] = None
    approved: Optional[bool] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "forbid"


class ProviderResponse(ProviderProfile, TimestampedSchema):
    id: str
    media: ProviderMedia
    approved: bool
