# leaf_analyzer/services/classifier.py
"""
Label-to-verdict classification engine.

Turns the label annotations of a vision provider into a coarse health verdict:

    raw labels -> filter_plant_labels -> classify_verdict -> select_recommendations

Everything here is synchronous and free of I/O, so it can be called from any
number of requests at once.
"""
import logging
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from leaf_analyzer.exceptions import InvalidLabelError
from leaf_analyzer.models.leaf_analysis import AnalysisResult, DetectedLabel, HealthStatus, Label

logger = logging.getLogger(__name__)

# A label is relevant to plant condition if its description contains one of these
PLANT_KEYWORDS: Tuple[str, ...] = ("leaf", "plant", "disease", "healthy", "damage")

HEALTHY_KEYWORDS: Tuple[str, ...] = ("healthy", "green", "fresh")
DISEASE_KEYWORDS: Tuple[str, ...] = ("disease", "damage", "brown", "yellow", "spot")

UNKNOWN_CONFIDENCE = 0
# Not derived from scores: neither keyword set matched
FURTHER_ANALYSIS_CONFIDENCE = 50

RECOMMENDATIONS: Dict[HealthStatus, Tuple[str, ...]] = {
    HealthStatus.HEALTHY: (
        "Continue current care routine",
        "Monitor regularly for any changes",
        "Maintain proper watering schedule",
    ),
    HealthStatus.POTENTIALLY_DISEASED: (
        "Consult with agricultural expert",
        "Consider appropriate treatment",
        "Isolate affected plants if necessary",
        "Improve ventilation and reduce humidity",
    ),
    HealthStatus.NEEDS_FURTHER_ANALYSIS: (
        "Take clearer photos of affected areas",
        "Consult with local agricultural extension",
        "Monitor plant closely for changes",
    ),
    HealthStatus.UNKNOWN: (),
}

LabelLike = Union[Label, Mapping[str, Any]]


def _contains_any(text: str, keywords: Iterable[str]) -> bool:
    text_lower = text.lower()
    return any(keyword in text_lower for keyword in keywords)


def to_percent(score: float) -> int:
    """
    Convert a 0-1 score into an integer percentage, rounding halves up.

    On non-negative input this is the same as rounding half away from zero,
    so 0.125 gives 13 and 0.625 gives 63 where round() would give 12 and 62.
    """
    return int(math.floor(score * 100 + 0.5))


def parse_labels(raw_labels: Optional[Iterable[LabelLike]]) -> List[Label]:
    """
    Coerce provider annotations into Label models.

    Raises:
        InvalidLabelError: if an entry is not a mapping, lacks a description
            or carries a score outside [0, 1].
    """
    if raw_labels is None:
        return []

    labels = []
    for index, raw in enumerate(raw_labels):
        if isinstance(raw, Label):
            labels.append(raw)
            continue
        if not isinstance(raw, Mapping):
            raise InvalidLabelError(f"Label #{index} must be an object, got {type(raw).__name__}")
        try:
            labels.append(Label.model_validate(raw))
        except ValidationError as e:
            raise InvalidLabelError(f"Label #{index} is invalid: {e}") from e
    return labels


def filter_plant_labels(labels: Optional[Sequence[Label]]) -> List[Label]:
    """Keep the labels that talk about plant condition, in their original order."""
    if not labels:
        return []
    return [label for label in labels if _contains_any(label.description, PLANT_KEYWORDS)]


def _score_of(label: Label) -> float:
    if label.score is None:
        raise InvalidLabelError(f"Label '{label.description}' has no score")
    return label.score


def classify_verdict(filtered: Sequence[Label]) -> Tuple[HealthStatus, int]:
    """
    Pick the verdict for a list of plant related labels.

    Rules, first match wins:
        no labels                       -> Unknown, 0
        healthy keyword, no disease one -> Healthy, best score
        any disease keyword             -> Potentially Diseased, best score
        otherwise                       -> Needs Further Analysis, 50

    A label matching both keyword sets counts as diseased.
    """
    if not filtered:
        return HealthStatus.UNKNOWN, UNKNOWN_CONFIDENCE

    is_healthy = any(_contains_any(label.description, HEALTHY_KEYWORDS) for label in filtered)
    is_diseased = any(_contains_any(label.description, DISEASE_KEYWORDS) for label in filtered)

    if is_healthy and not is_diseased:
        status = HealthStatus.HEALTHY
    elif is_diseased:
        status = HealthStatus.POTENTIALLY_DISEASED
    else:
        return HealthStatus.NEEDS_FURTHER_ANALYSIS, FURTHER_ANALYSIS_CONFIDENCE

    best_score = max(_score_of(label) for label in filtered)
    return status, to_percent(best_score)


def select_recommendations(status: HealthStatus) -> List[str]:
    return list(RECOMMENDATIONS[status])


def analyze_labels(raw_labels: Optional[Iterable[LabelLike]]) -> AnalysisResult:
    """
    Run the whole engine over provider labels.

    Args:
        raw_labels: Label models or plain mappings with 'description' and 'score'.

    Returns:
        The verdict, its confidence, the plant related labels and the advice list.

    Raises:
        InvalidLabelError: for malformed labels, or a plant related label without a score.
    """
    labels = parse_labels(raw_labels)
    filtered = filter_plant_labels(labels)
    status, confidence = classify_verdict(filtered)

    detected = [
        DetectedLabel(name=label.description, confidence=to_percent(_score_of(label)))
        for label in filtered
    ]
    logger.debug(f"Verdict {status.value} ({confidence}%) from {len(filtered)}/{len(labels)} plant labels")

    return AnalysisResult(
        health_status=status,
        confidence=confidence,
        detected_labels=detected,
        recommendations=select_recommendations(status),
    )
