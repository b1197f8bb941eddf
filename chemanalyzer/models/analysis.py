import base64
import binascii
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class TextQuery(BaseModel):
    """A product name typed or dictated by the user."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str


class ImageQuery(BaseModel):
    """A photo of a product label, base64 encoded."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["image"] = "image"
    mime_type: str = Field(min_length=1)
    data: str = Field(min_length=1)

    @field_validator("data")
    @classmethod
    def _check_base64(cls, v: str) -> str:
        try:
            base64.b64decode(v, validate=True)
        except binascii.Error as e:
            raise ValueError(f"data is not valid base64: {e}") from e
        return v

    @classmethod
    def from_bytes(cls, raw: bytes, mime_type: str) -> "ImageQuery":
        return cls(mime_type=mime_type, data=base64.b64encode(raw).decode("ascii"))

    def decoded(self) -> bytes:
        return base64.b64decode(self.data)


AnalysisInput = Annotated[Union[TextQuery, ImageQuery], Field(discriminator="kind")]


class AnalysisResult(BaseModel):
    """Structured chemical analysis of a product.

    Field names are camelCase on the wire, matching the response schema sent
    to Gemini. Keys outside the twelve fields are dropped.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        strict=True,
        extra="ignore",
    )

    manufacturer: str
    country: str
    chemical_nature: str
    purpose: str
    medium_polarity: str
    medium_chemical_nature: str
    organobentonite_brands: str
    bentonite_base_type: str
    bentonite_properties: str
    surfactant_nature: str
    application_notes: str
    organobentonite_manufacturers: str


class AnalysisResponse(BaseModel):
    result: AnalysisResult
    model: str
    recommendation: str | None = None
