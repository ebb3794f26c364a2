"""Note payloads.

Note content is a tagged union: either freeform markdown text or a
structured technical analysis record. Older clients posted the analysis
wizard state as a JSON string with camelCase keys; those strings are
still understood and upgraded to the structured form.
"""
import json
import re
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from stockfolio.Schemas.stock import normalize_ticker


class Volume(str, Enum):
    low = "Low"
    medium = "Medium"
    high = "High"


class Currency(str, Enum):
    eur = "EUR"
    usd = "USD"


class MovingAverages(BaseModel):
    """Whether the price trades above each moving average."""

    ma10: bool = False
    ma50: bool = False
    ma150: bool = False
    ma200: bool = False


class Analysis(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    moving_averages: MovingAverages = Field(
        default_factory=MovingAverages,
        validation_alias=AliasChoices("moving_averages", "movingAverages"),
    )
    volume: Volume = Volume.low
    support: str = ""
    resistance: str = ""
    additional_notes: str = Field(
        "", validation_alias=AliasChoices("additional_notes", "additionalNotes")
    )
    currency: Optional[Currency] = None


class FreeformContent(BaseModel):
    kind: Literal["freeform"] = "freeform"
    text: str


class StructuredContent(BaseModel):
    kind: Literal["structured"] = "structured"
    analysis: Analysis


NoteContent = Annotated[
    Union[FreeformContent, StructuredContent], Field(discriminator="kind")
]

content_adapter = TypeAdapter(NoteContent)

LEGACY_ANALYSIS_KEYS = {"movingAverages", "moving_averages"}
NOTE_ID_PATTERN = re.compile(r"^[A-Za-z0-9._~\-]+$")


def _legacy_analysis(raw: str) -> Optional[dict]:
    try:
        decoded = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(decoded, dict) or not LEGACY_ANALYSIS_KEYS & decoded.keys():
        return None
    try:
        Analysis.model_validate(decoded)
    except ValidationError:
        # looks like wizard output but isn't; keep it as the text the user typed
        return None
    return decoded


def coerce_content(value: Any) -> Any:
    """Turn a bare string into a tagged content payload; leave anything else for validation."""
    if not isinstance(value, str):
        return value
    legacy = _legacy_analysis(value)
    if legacy is not None:
        return {"kind": "structured", "analysis": legacy}
    return {"kind": "freeform", "text": value}


def dump_content(content: Union[FreeformContent, StructuredContent]) -> str:
    return content.model_dump_json()


def load_content(raw: str) -> dict:
    """Decode stored content. Rows that aren't a valid tagged payload read back as freeform text."""
    try:
        return content_adapter.validate_json(raw).model_dump(mode="json")
    except ValidationError:
        return content_adapter.validate_python(coerce_content(raw)).model_dump(mode="json")


class NoteCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = Field(None, max_length=64)
    stock_id: str = Field(..., max_length=20, examples=["AAPL"])
    content: NoteContent
    created_at: Optional[Any] = None

    @field_validator("id")
    @classmethod
    def _id(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        if not NOTE_ID_PATTERN.match(value.strip()):
            raise ValueError("note id may only contain letters, digits and . _ - ~")
        return value.strip()

    @field_validator("stock_id")
    @classmethod
    def _stock_id(cls, value: str) -> str:
        return normalize_ticker(value)

    @field_validator("content", mode="before")
    @classmethod
    def _content(cls, value: Any) -> Any:
        return coerce_content(value)


class NoteUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: NoteContent
    created_at: Optional[Any] = None

    @field_validator("content", mode="before")
    @classmethod
    def _content(cls, value: Any) -> Any:
        return coerce_content(value)
