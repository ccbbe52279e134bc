# leaf_analyzer/services/vision_client.py
"""
Google Cloud Vision client.

Calls the images:annotate REST endpoint with label and text detection in a
single request. Credentials and endpoint are handed in at construction, so
nothing about the provider lives in module globals.
"""
import base64
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from leaf_analyzer.exceptions import VisionProviderError
from leaf_analyzer.models.leaf_analysis import Label
from leaf_analyzer.services.classifier import parse_labels

logger = logging.getLogger(__name__)

DEFAULT_VISION_API_URL = "https://vision.googleapis.com/v1/images:annotate"


@dataclass(frozen=True)
class VisionAnnotations:
    labels: List[Label] = field(default_factory=list)
    text_detected: bool = False


class VisionClient:
    """Fetches label and text annotations for an image."""

    def __init__(
            self,
            api_key: str,
            api_url: str = DEFAULT_VISION_API_URL,
            max_results: int = 10,
            timeout: float = 30.0,
            transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.max_results = max_results
        self.timeout = timeout
        # Tests inject httpx.MockTransport here
        self._transport = transport

    def build_payload(self, image_bytes: bytes) -> Dict[str, Any]:
        return {
            "requests": [
                {
                    "image": {"content": base64.b64encode(image_bytes).decode("utf-8")},
                    "features": [
                        {"type": "LABEL_DETECTION", "maxResults": self.max_results},
                        {"type": "TEXT_DETECTION"},
                    ],
                }
            ]
        }

    async def annotate(self, image_bytes: bytes) -> VisionAnnotations:
        """
        Send the image to the provider and return its annotations.

        Raises:
            VisionProviderError: if the key is missing, the request fails or the
                provider reports an error for the image.
            InvalidLabelError: if the provider returns a malformed label.
        """
        if not self.api_key:
            raise VisionProviderError("Vision API key is not configured (set VISION_API_KEY)")

        payload = self.build_payload(image_bytes)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.api_url, params={"key": self.api_key}, json=payload)
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Vision API returned {e.response.status_code}: {e.response.text[:200]}")
            raise VisionProviderError(f"Vision API returned status {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error(f"Vision API request failed: {e!r}")
            raise VisionProviderError(f"Vision API request failed: {e}") from e
        except ValueError as e:
            raise VisionProviderError("Vision API returned invalid JSON") from e

        return self.parse_response(body)

    @staticmethod
    def parse_response(body: Any) -> VisionAnnotations:
        """Extract labels and the text flag from an images:annotate response body."""
        if not isinstance(body, dict):
            raise VisionProviderError("Unexpected Vision API response")
        responses = body.get("responses") or []
        if not responses:
            raise VisionProviderError("Vision API returned no responses")

        if not isinstance(responses, list):
            raise VisionProviderError("Unexpected Vision API response: 'responses' is not a list")

        result = responses[0] or {}
        if not isinstance(result, dict):
            raise VisionProviderError("Unexpected Vision API response: image result is not an object")

        error = result.get("error")
        if error:
            if isinstance(error, dict):
                raise VisionProviderError(error.get("message") or "Vision API reported an error")
            raise VisionProviderError(f"Vision API reported an error: {error}")

        label_annotations = result.get("labelAnnotations") or []
        text_annotations = result.get("textAnnotations") or []
        if not isinstance(label_annotations, list) or not isinstance(text_annotations, list):
            raise VisionProviderError("Unexpected Vision API response: annotations are not lists")

        labels = parse_labels(label_annotations)
        logger.info(f"Vision API returned {len(labels)} labels, text detected: {bool(text_annotations)}")

        return VisionAnnotations(labels=labels, text_detected=len(text_annotations) > 0)
