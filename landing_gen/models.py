"""
Data models for the landing page generation pipeline.
"""

import re
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from landing_gen.errors import ValidationError

MAX_IMAGES = 2

_NON_DIGITS = re.compile(r"\D")


class Industry(str, Enum):
    """Industries offered by the business form."""
    FOOD = "Food"
    RETAIL = "Retail"
    PROFESSIONAL_SERVICES = "Professional Services"
    HEALTH = "Health & Wellness"
    BEAUTY = "Beauty & Personal Care"
    TECHNOLOGY = "Technology"
    EDUCATION = "Education"
    CONSTRUCTION = "Construction & Home"
    TOURISM = "Tourism & Hospitality"
    AUTOMOTIVE = "Automotive"
    OTHER = "Other"

    @classmethod
    def choices(cls) -> list:
        return [industry.value for industry in cls]


class BusinessFormData(BaseModel):
    """Business description submitted from the form."""
    name: str
    industry: str = Industry.FOOD.value
    description: str
    sells: str
    phone: Optional[str] = None
    images: Tuple[str, ...] = Field(default_factory=tuple)

    class Config:
        frozen = True

    @field_validator("name", "description", "sells")
    @classmethod
    def _require_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("industry")
    @classmethod
    def _normalize_industry(cls, value: Any) -> str:
        if isinstance(value, Industry):
            return value.value
        value = str(value).strip()
        return value or Industry.OTHER.value

    @field_validator("phone")
    @classmethod
    def _blank_phone_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @field_validator("images")
    @classmethod
    def _limit_images(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        if len(value) > MAX_IMAGES:
            raise ValueError(f"at most {MAX_IMAGES} images are allowed, got {len(value)}")
        for image in value:
            if not image.startswith("data:"):
                raise ValueError("images must be data URIs")
        return value

    @property
    def phone_digits(self) -> str:
        """Phone number with every non-digit character removed."""
        if not self.phone:
            return ""
        return _NON_DIGITS.sub("", self.phone)

    @property
    def has_images(self) -> bool:
        return len(self.images) > 0

    @classmethod
    def create(cls, **fields: Any) -> "BusinessFormData":
        """
        Build form data, raising the pipeline's ValidationError on bad input.

        Args:
            **fields: Form field values.

        Returns:
            Validated BusinessFormData.
        """
        try:
            return cls(**fields)
        except PydanticValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(loc) for loc in err['loc']) or 'form'}: {err['msg']}"
                for err in e.errors()
            )
            raise ValidationError(f"Invalid business data: {problems}") from e

    @classmethod
    def coerce(cls, data: Any) -> "BusinessFormData":
        """Accept an existing instance or a mapping of form fields."""
        if isinstance(data, cls):
            return data
        if isinstance(data, Mapping):
            return cls.create(**data)
        raise ValidationError(f"Unsupported form payload: {type(data).__name__}")


class GeneratedArtifact(BaseModel):
    """Final result of a successful generation cycle."""
    image_data_uri: str
    html: str
    preview_url: str

    class Config:
        frozen = True
