"""Listing payload schemas - what the forms must carry."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ListingIn(BaseModel):
    """Fields submitted by the new/edit forms."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    image: str | None = Field(None, max_length=2048)
    price: float = Field(..., ge=0, allow_inf_nan=False)
    location: str = Field(..., min_length=1, max_length=255)
    country: str = Field(..., min_length=1, max_length=255)

    @field_validator("image", mode="before")
    @classmethod
    def blank_image_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ListingSearch(BaseModel):
    """Search form. Blank fields are left out of the filter."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    location: str | None = None
    price: float | None = Field(None, allow_inf_nan=False)

    @field_validator("location", "price", mode="before")
    @classmethod
    def blank_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def criteria(self) -> dict:
        return self.model_dump(exclude_none=True)
