# leaf_analyzer/models/leaf_analysis.py
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_serializer, model_validator
from pydantic.alias_generators import to_camel

# Strict: True or "0.9" would otherwise be coerced into a confidence
Score = Annotated[float, Field(strict=True, ge=0.0, le=1.0)]


class HealthStatus(str, Enum):
    """Possible verdicts for an analyzed leaf"""
    HEALTHY = "Healthy"
    POTENTIALLY_DISEASED = "Potentially Diseased"
    NEEDS_FURTHER_ANALYSIS = "Needs Further Analysis"
    UNKNOWN = "Unknown"


class _WireModel(BaseModel):
    # camelCase on the wire, snake_case in Python
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Label(_WireModel):
    """One annotation returned by the vision provider"""
    description: StrictStr = Field(..., description="Label text, e.g. 'Leaf' or 'Plant pathology'")
    score: Optional[Score] = Field(None, description="Provider confidence (0-1)")
    mid: Optional[str] = Field(None, description="Knowledge graph id of the label")
    topicality: Optional[float] = Field(None, description="Relevance of the label to the image")


class DetectedLabel(_WireModel):
    name: str
    confidence: int = Field(..., description="Label score as a percentage", ge=0, le=100)


class AnalysisResult(_WireModel):
    """Verdict produced by the classification engine"""
    health_status: HealthStatus = Field(
        ...,
        description="Coarse health verdict for the leaf"
    )
    confidence: int = Field(
        ...,
        description="Confidence of the verdict (0-100)",
        ge=0,
        le=100
    )
    detected_labels: List[DetectedLabel] = Field(
        default_factory=list,
        description="Plant related labels in provider order"
    )
    recommendations: List[str] = Field(
        default_factory=list,
        description="Recommended actions for the verdict"
    )

    @model_validator(mode="after")
    def _recommendations_present(self) -> "AnalysisResult":
        if self.health_status != HealthStatus.UNKNOWN and not self.recommendations:
            raise ValueError(f"{self.health_status.value} verdict requires recommendations")
        return self


class AnalysisReport(AnalysisResult):
    """Engine result plus request metadata, as returned by /analyze-leaf"""
    analysis_date: datetime
    processing_time_ms: int = Field(..., description="Processing time in milliseconds")
    image_width: int = Field(..., description="Width of the analyzed image")
    image_height: int = Field(..., description="Height of the analyzed image")


class RawVisionData(_WireModel):
    labels: List[Label] = Field(default_factory=list, description="Top provider labels, unfiltered")
    text_detected: bool = False

    @field_serializer("labels")
    def _echo_labels(self, labels: List[Label]) -> List[Dict[str, Any]]:
        # echo only the fields the provider actually sent
        return [label.model_dump(by_alias=True, exclude_none=True) for label in labels]


class AnalyzeLeafResponse(_WireModel):
    success: bool = True
    analysis: AnalysisReport
    raw_data: RawVisionData


class LabelBatch(_WireModel):
    """Request body for classifying labels a client already holds"""
    # kept as plain mappings so malformed entries surface as InvalidLabelError
    labels: List[Dict[str, Any]] = Field(default_factory=list)


class ErrorResponse(_WireModel):
    success: bool = False
    error: str
    message: Optional[str] = None
