from typing import Any, List

from pydantic import BaseModel, Field, StrictBool, field_validator
from pydantic.alias_generators import to_camel


class MediaItem(BaseModel):
    url: str = Field(..., min_length=1)
    is_main: bool = False

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ProviderMedia(BaseModel):
    images: List[MediaItem] = Field(default_factory=list)
    videos: List[MediaItem] = Field(default_factory=list)

    @field_validator("images", "videos", mode="before")
    @classmethod
    def _coerce_legacy(cls, value: Any) -> Any:
        # older records keep media entries as bare url strings
        return [{"url": v} if isinstance(v, str) else v for v in value or [] if v]

    @classmethod
    def from_document(cls, doc: dict[str, Any] | None) -> "ProviderMedia":
        """
        Build from the stored JSON document.

        Bare url strings become non-main items. An image list that ends up
        without a main gets its first item promoted so every list handed out
        has exactly one main.
        """
        media = cls.model_validate(doc or {})
        if media.images and not any(i.is_main for i in media.images):
            media.images[0].is_main = True
        return media

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

    def all_urls(self) -> List[str]:
        return [i.url for i in self.images] + [v.url for v in self.videos]


# ---------- requests ----------
class ImageUrlRequest(BaseModel):
    image_url: str = Field(..., min_length=1)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class SetMainRequest(ImageUrlRequest):
    is_main: StrictBool = True


# ---------- responses ----------
class MediaResponse(BaseModel):
    message: str
    images: List[MediaItem]
    videos: List[MediaItem]

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class PurgeResponse(BaseModel):
    message: str
    attempted: int
    failed: int
    failed_urls: List[str] = []

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ExportPlanItem(BaseModel):
    url: str
    filename: str
    kind: str


class ExportPlanResponse(BaseModel):
    provider_id: str
    total: int
    items: List[ExportPlanItem]

    class Config:
        alias_generator = to_camel
        populate_by_name = True
