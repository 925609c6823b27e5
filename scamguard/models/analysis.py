from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class RiskScore(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class InputMode(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    LINK = "link"


class GroundingSource(BaseModel):
    title: str
    uri: str


class AnalysisResult(BaseModel):
    risk_score: RiskScore
    scam_type: str = Field(description="The name of the detected scam or 'Legitimate' if safe")
    red_flags: list[str] = Field(
        default_factory=list,
        description="Specific suspicious elements discovered, in the order the model reported them.",
    )
    advice: str = Field(description="Clear instructions for the user")
    sources: Optional[list[GroundingSource]] = Field(
        default=None,
        description="Web citations the model used to ground its verdict. Never empty, unique by uri.",
    )


class AnalysisState(BaseModel):
    loading: bool = False
    result: Optional[AnalysisResult] = None
    error: Optional[str] = None

    @model_validator(mode="after")
    def validate_exclusive(self) -> "AnalysisState":
        if self.result is not None and self.error is not None:
            raise ValueError("result and error cannot both be set")
        if self.loading and (self.result is not None or self.error is not None):
            raise ValueError("a loading state cannot carry a result or an error")
        return self


class AnalyzeRequest(BaseModel):
    input: str = Field(
        ...,
        min_length=1,
        description="Message text, a URL, or an image data URI (data:<mime>;base64,<payload>).",
    )
    mode: InputMode = Field(
        default=InputMode.TEXT,
        description=(
            "'text' analyzes a pasted message. "
            "'link' investigates a URL with live web search. "
            "'image' inspects a screenshot passed as a data URI."
        ),
    )

    @field_validator("input")
    @classmethod
    def validate_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("input cannot be blank")
        return value

    @model_validator(mode="after")
    def validate_image_input(self) -> "AnalyzeRequest":
        if self.mode is InputMode.IMAGE and (not self.input.startswith("data:") or "," not in self.input):
            raise ValueError("image input must be a data URI: data:<mime>;base64,<payload>")
        return self
