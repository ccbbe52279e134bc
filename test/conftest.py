# test/conftest.py
import io
import json
import sys
from pathlib import Path
from typing import Any, Dict, List

import httpx
import pytest
from PIL import Image

# Add the project root directory to the Python path to allow importing leaf_analyzer
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from leaf_analyzer.services.vision_client import VisionClient  # noqa: E402

TEST_API_KEY = "test-key"
TEST_API_URL = "https://vision.test/v1/images:annotate"


def make_png(width: int = 32, height: int = 24, color=(40, 160, 60)) -> bytes:
    """Small in-memory PNG standing in for a leaf photo."""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


def vision_body(labels: List[Dict[str, Any]], texts: List[Dict[str, Any]] = None) -> Dict[str, Any]:
    """images:annotate response with a single image result."""
    return {"responses": [{"labelAnnotations": labels, "textAnnotations": texts or []}]}


class RecordingHandler:
    """MockTransport handler that answers with a fixed response and keeps the requests it saw."""

    def __init__(self, body: Any = None, status_code: int = 200):
        self.body = body if body is not None else vision_body([])
        self.status_code = status_code
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last_payload(self) -> Dict[str, Any]:
        return json.loads(self.requests[-1].content)


def make_vision_client(handler, api_key: str = TEST_API_KEY) -> VisionClient:
    return VisionClient(
        api_key=api_key,
        api_url=TEST_API_URL,
        max_results=10,
        timeout=5.0,
        transport=httpx.MockTransport(handler),
    )


GREEN_LEAF_LABELS = [
    {"mid": "/m/09t49", "description": "Leaf", "score": 0.97, "topicality": 0.97},
    {"mid": "/m/05s2s", "description": "Plant", "score": 0.95, "topicality": 0.95},
    {"mid": "/m/038hg", "description": "Green", "score": 0.9, "topicality": 0.9},
    {"mid": "/m/0c9ph5", "description": "Healthy plant", "score": 0.88, "topicality": 0.88},
    {"mid": "/m/02zr8", "description": "Terrestrial plant", "score": 0.8, "topicality": 0.8},
]

SPOTTED_LEAF_LABELS = [
    {"description": "Leaf", "score": 0.93},
    {"description": "Plant pathology", "score": 0.84},
    {"description": "Leaf spot disease", "score": 0.71},
    {"description": "Yellow", "score": 0.66},
]


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()
