# leaf_analyzer/services/analyzer.py
import time
import logging
from datetime import datetime, timezone
from io import BytesIO  # Um Bytes als Datei zu behandeln
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from leaf_analyzer.config import Settings
from leaf_analyzer.exceptions import UnreadableImageError
from leaf_analyzer.models.leaf_analysis import AnalysisReport, AnalyzeLeafResponse, RawVisionData
from leaf_analyzer.services.classifier import analyze_labels
from leaf_analyzer.services.vision_client import VisionClient

logger = logging.getLogger(__name__)


def read_image_size(image_bytes: bytes) -> Tuple[int, int]:
    """Return (width, height) of the uploaded image, failing if Pillow cannot identify it."""
    try:
        with Image.open(BytesIO(image_bytes)) as img:
            return img.size
    except (UnidentifiedImageError, OSError) as e:
        raise UnreadableImageError(f"Uploaded file is not a readable image: {e}") from e


class LeafAnalyzerService:
    """Service für die Analyse von Blattbildern."""

    def __init__(self, vision_client: VisionClient, raw_label_limit: int = 10):
        self.vision_client = vision_client
        self.raw_label_limit = raw_label_limit

    @classmethod
    def from_settings(cls, settings: Settings) -> "LeafAnalyzerService":
        vision_client = VisionClient(
            api_key=settings.VISION_API_KEY,
            api_url=settings.VISION_API_URL,
            max_results=settings.VISION_MAX_RESULTS,
            timeout=settings.VISION_TIMEOUT_SECONDS,
        )
        return cls(vision_client, raw_label_limit=settings.RAW_LABEL_LIMIT)

    async def analyze_image(self, image_bytes: bytes) -> AnalyzeLeafResponse:
        """
        Analyze leaf image bytes and return the verdict with the raw provider data.

        The provider call is awaited first; the verdict itself is computed
        synchronously from the resolved label list.
        """
        start_time = time.time()

        width, height = read_image_size(image_bytes)
        annotations = await self.vision_client.annotate(image_bytes)

        result = analyze_labels(annotations.labels)
        processing_time = int((time.time() - start_time) * 1000)
        logger.info(
            f"Analyzed {width}x{height} image: {result.health_status.value} "
            f"({result.confidence}%) in {processing_time} ms")

        report = AnalysisReport(
            **result.model_dump(),
            analysis_date=datetime.now(timezone.utc),
            processing_time_ms=processing_time,
            image_width=width,
            image_height=height,
        )
        return AnalyzeLeafResponse(
            analysis=report,
            raw_data=RawVisionData(
                labels=annotations.labels[:self.raw_label_limit],
                text_detected=annotations.text_detected,
            ),
        )
