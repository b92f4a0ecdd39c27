"""
Shared pytest fixtures and configuration for all tests
"""
import pytest
import sys
from pathlib import Path

import httpx

# Add backend to Python path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Smallest valid PNG header, enough for upload and encoding tests
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"


def gemini_response(*parts):
    """Build a generateContent reply with one candidate holding the given parts"""
    return {"candidates": [{"content": {"role": "model", "parts": list(parts)}}]}


def image_part(data, mime_type=None):
    inline = {"data": data}
    if mime_type:
        inline["mimeType"] = mime_type
    return {"inlineData": inline}


def text_part(text):
    return {"text": text}


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it receives"""

    def __init__(self, payload=None, status_code=200, handler=None):
        self.requests = []
        self._payload = payload
        self._status_code = status_code
        self._handler = handler
        super().__init__(self._record)

    def _record(self, request):
        self.requests.append(request)
        if self._handler is not None:
            return self._handler(request)
        return httpx.Response(self._status_code, json=self._payload)

    @property
    def call_count(self):
        return len(self.requests)


@pytest.fixture
def png_bytes():
    return PNG_BYTES


@pytest.fixture
def make_transport():
    """Factory for a RecordingTransport answering with a fixed payload"""
    def _make(payload=None, status_code=200, handler=None):
        return RecordingTransport(payload=payload, status_code=status_code, handler=handler)
    return _make


@pytest.fixture
def make_service(make_transport):
    """Factory for a GeminiImageService wired to a RecordingTransport"""
    from services.gemini_service import GeminiImageService

    def _make(payload=None, status_code=200, handler=None, api_key="test-key"):
        transport = make_transport(payload=payload, status_code=status_code, handler=handler)
        service = GeminiImageService(api_key=api_key, transport=transport)
        return service, transport
    return _make
