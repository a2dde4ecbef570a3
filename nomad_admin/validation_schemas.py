"""
Validation models for the admin forms.

Each model receives the raw widget values of one form and produces the
coerced values that are sent to the backend.
"""

from typing import Annotated, Literal, Optional, Any
from datetime import date

from pydantic import BaseModel, ConfigDict, EmailStr, BeforeValidator, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

from .model_builder import (
    RequiredFloat, OptionalFloat, OptionalNonNegFloat, OptionalNonNegInt,
    OptionalText, OptionalUrl, OptionalTime, OptionalDate,
    TagList, LowerChoice, ImageFile, VideoFile,
    blank_to_none, required_text, required_date, slugify
)

Status = Annotated[Literal["draft", "published", "archived"], LowerChoice]
SpaceType = Annotated[Literal["coworking_space", "coworking_cafe", "coliving_space"], LowerChoice]
Currency = Literal["USD", "EUR", "GBP", "IDR", "THB", "VND"]
AttractionCategory = Literal[
    "lake", "temple", "viewpoint", "museum", "cafe",
    "restaurant", "beach", "mountain", "park", "other"
]
OptionalEmail = Annotated[Optional[EmailStr], BeforeValidator(blank_to_none)]


# Space types that sell offers (desks, rooms, passes)
SPACE_TYPES_WITH_OFFERS = ("coworking_space", "coliving_space")


class FormModel(BaseModel):
    """Base for form models: unknown keys (id, created_at, ...) are dropped."""

    model_config = ConfigDict(extra="ignore")


class SpaceInput(FormModel):
    name: required_text("Name is required")
    space_type: SpaceType = "coworking_space"

    short_description: required_text("Short description is required")
    content: OptionalText = None

    location: required_text("Location is required")
    address: OptionalText = None
    latitude: OptionalFloat = None
    longitude: OptionalFloat = None

    amenities: TagList = []
    options: TagList = []

    opening_time: OptionalTime = None
    closing_time: OptionalTime = None
    capacity: OptionalNonNegInt = None
    price_from: OptionalNonNegFloat = None
    allow_booking: bool = True

    wifi_speed_mbps: OptionalNonNegInt = None
    weather_condition: OptionalText = None

    contact_email: OptionalEmail = None
    contact_phone: OptionalText = None
    website: OptionalUrl = None
    instagram: OptionalUrl = None
    facebook: OptionalUrl = None
    whatsapp: OptionalText = None

    status: Status = "draft"
    tags: TagList = []
    image: ImageFile = None

    @field_validator('latitude')
    @classmethod
    def _check_latitude(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not -90 <= v <= 90:
            raise PydanticCustomError('latitude', 'Latitude must be between -90 and 90')
        return v

    @field_validator('longitude')
    @classmethod
    def _check_longitude(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not -180 <= v <= 180:
            raise PydanticCustomError('longitude', 'Longitude must be between -180 and 180')
        return v


class OfferInput(FormModel):
    name: required_text("Offer name is required")
    description: OptionalText = None
    price: Annotated[RequiredFloat, Field(ge=0)] = 0.0
    currency: Currency = "USD"
    capacity: OptionalNonNegInt = None
    available: bool = True

    @field_validator('currency', mode='before')
    @classmethod
    def _default_currency(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return "USD"
        return v.strip().upper() if isinstance(v, str) else v


class AttractionInput(FormModel):
    name: required_text("Attraction name is required")
    description: OptionalText = None
    distance_km: Annotated[RequiredFloat, Field(ge=0)] = 0.0
    category: Optional[AttractionCategory] = None
    latitude: OptionalFloat = None
    longitude: OptionalFloat = None
    website: OptionalUrl = None

    @field_validator('category', mode='before')
    @classmethod
    def _blank_category(cls, v: Any) -> Any:
        return blank_to_none(v)


class EventInput(FormModel):
    title: required_text("Title is required")
    description: OptionalText = None
    content: OptionalText = None
    start_date: required_date("Start date is required")
    end_date: OptionalDate = None
    location: required_text("Location is required")
    venue: OptionalText = None
    capacity: OptionalNonNegInt = None
    price: OptionalNonNegFloat = None
    status: Status = "draft"
    tags: TagList = []
    image: ImageFile = None
    is_online: bool = False

    @field_validator('end_date')
    @classmethod
    def _end_after_start(cls, v: Optional[date], info) -> Optional[date]:
        start = info.data.get('start_date')
        if v is not None and start is not None and v < start:
            raise PydanticCustomError('date_order', 'End date cannot be before the start date')
        return v


class BlogInput(FormModel):
    name: required_text("Name is required")
    content: required_text("Content is required")
    status: Status = "draft"
    tags: TagList = []
    slug: OptionalText = None
    image: ImageFile = None
    video: VideoFile = None
    time_to_read: OptionalNonNegInt = None

    @field_validator('content')
    @classmethod
    def _content_length(cls, v: str) -> str:
        if len(v) < 3:
            raise PydanticCustomError('content_length', 'Content should be at least 3 characters')
        return v

    @field_validator('tags')
    @classmethod
    def _at_least_one_tag(cls, v):
        if not v:
            raise PydanticCustomError('tags_required', 'At least one tag is required')
        return v

    @model_validator(mode='after')
    def _fill_slug(self):
        if self.slug:
            self.slug = slugify(self.slug) or None
        if not self.slug:
            self.slug = slugify(self.name) or None
        return self


FORM_MODELS = {
    'space': SpaceInput,
    'offer': OfferInput,
    'attraction': AttractionInput,
    'event': EventInput,
    'blog': BlogInput,
}
