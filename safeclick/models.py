# safeclick/models.py

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ChatMode = Literal["lite", "search", "thinking"]


class AnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status: Literal["Safe", "Suspicious", "Dangerous"]
    risk_level: int = Field(..., alias="riskLevel", ge=0, le=100)
    reasoning: str
    suggested_actions: List[str] = Field(..., alias="suggestedActions")
    detected_indicators: List[str] = Field(..., alias="detectedIndicators")


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "model"]
    text: str


class Source(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    uri: str


class ChatReply(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    sources: Optional[List[Source]] = None


# ---------------------------------------------------------
# HTTP request bodies
# ---------------------------------------------------------
class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(..., description="Artifact to audit (message, URL, email body).")
    image_data: Optional[str] = Field(
        None,
        alias="imageData",
        description="Optional screenshot as a base64 data URI.",
    )


class ChatRequest(BaseModel):
    history: List[ChatMessage] = Field(..., min_length=1)
    mode: ChatMode = "lite"
