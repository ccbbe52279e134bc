# leaf_analyzer/api/routes.py
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from leaf_analyzer.config import Settings, get_settings
from leaf_analyzer.exceptions import InvalidLabelError, LeafAnalyzerError, UnreadableImageError
from leaf_analyzer.models.leaf_analysis import AnalysisResult, AnalyzeLeafResponse, LabelBatch
from leaf_analyzer.services.analyzer import LeafAnalyzerService
from leaf_analyzer.services.classifier import analyze_labels

router = APIRouter()
logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPE_PREFIX = "image/"


def get_analyzer_service(settings: Settings = Depends(get_settings)) -> LeafAnalyzerService:
    """Build the analyzer from settings; overridden in tests."""
    return LeafAnalyzerService.from_settings(settings)


@router.post(
    "/analyze-leaf",
    response_model=AnalyzeLeafResponse,
    summary="Analyze an image of a plant leaf",
    description="Upload a leaf photo and get a health verdict with recommendations",
)
async def analyze_leaf_image(
        image: Optional[UploadFile] = File(None),
        settings: Settings = Depends(get_settings),
        analyzer: LeafAnalyzerService = Depends(get_analyzer_service),
) -> AnalyzeLeafResponse:
    """
    API endpoint for leaf image analysis. Reads image bytes directly.

    Args:
        image: The uploaded image file (multipart field 'image').
        settings: Application settings.
        analyzer: Service that calls the vision provider and classifies its labels.

    Returns:
        The verdict, request metadata and the top provider labels.
    """
    if image is None:
        raise HTTPException(status_code=400, detail="No image file provided")

    if not (image.content_type or "").startswith(ALLOWED_CONTENT_TYPE_PREFIX):
        raise HTTPException(status_code=400, detail="Only image files are allowed!")

    max_mb = settings.MAX_UPLOAD_SIZE // 1024 // 1024
    if image.size is not None and image.size > settings.MAX_UPLOAD_SIZE:
        raise HTTPException(status_code=413, detail=f"File too large. Maximum size is {max_mb}MB.")

    image_bytes = await image.read()

    if not image_bytes:
        raise HTTPException(status_code=400, detail="Uploaded file is empty.")
    if len(image_bytes) > settings.MAX_UPLOAD_SIZE:
        raise HTTPException(status_code=413, detail=f"File too large. Maximum size is {max_mb}MB.")

    try:
        return await analyzer.analyze_image(image_bytes)
    except UnreadableImageError as e:
        logger.warning(f"Rejected upload '{image.filename}': {e}")
        raise HTTPException(status_code=400, detail="Uploaded file is not a readable image.")
    except LeafAnalyzerError as e:
        logger.error(f"Error analyzing image: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail={"error": "Failed to analyze image", "message": str(e)},
        )


@router.post(
    "/analyze-labels",
    response_model=AnalysisResult,
    summary="Classify vision labels",
    description="Classify label annotations the client already obtained from a vision provider",
)
async def analyze_label_batch(batch: LabelBatch) -> AnalysisResult:
    try:
        return analyze_labels(batch.labels)
    except InvalidLabelError as e:
        raise HTTPException(
            status_code=422,
            detail={"error": "Invalid label data", "message": str(e)},
        )


@router.get(
    "/health",
    summary="API health status",
    description="Check if the analysis service is available"
)
async def health_check() -> Dict[str, Any]:
    return {
        "status": "healthy",
        "message": "Leaf Analyzer Backend is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
