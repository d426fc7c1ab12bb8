"""
Shared fixtures for the landing page generator tests.
"""

import asyncio
import time
from io import BytesIO
from types import SimpleNamespace

import pytest
from langchain_core.messages import AIMessage
from PIL import Image

from landing_gen.config import GenerationSettings
from landing_gen.io.image_loader import encode_data_uri
from landing_gen.models import BusinessFormData
from landing_gen.utils.llm_logger import get_logger

PAGE_HTML = '<!DOCTYPE html><html><body><img src="IMAGE_PLACEHOLDER"></body></html>'


def make_image_bytes(fmt: str = "PNG", size=(32, 18), color="orange") -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color=color).save(buffer, format=fmt)
    return buffer.getvalue()


class FakeUpload:
    """Stands in for a Streamlit UploadedFile."""

    def __init__(self, payload: bytes, type: str = "image/png", name: str = "upload.png", delay: float = 0.0):
        self.payload = payload
        self.type = type
        self.name = name
        self.delay = delay

    def getvalue(self) -> bytes:
        if self.delay:
            time.sleep(self.delay)
        return self.payload


class FakeGenerationClient:
    """In-memory generation client recording every call."""

    placeholder_token = "IMAGE_PLACEHOLDER"

    def __init__(self, image=b"fake-png-bytes", html=PAGE_HTML, image_error=None, page_error=None):
        self.image = image
        self.html = html
        self.image_error = image_error
        self.page_error = page_error
        self.image_calls = []
        self.page_calls = []
        self.image_gates = []
        self.page_gates = []

    async def generate_illustrative_image(self, data):
        self.image_calls.append(data)
        if self.image_gates:
            await self.image_gates.pop(0).wait()
        if self.image_error is not None:
            raise self.image_error
        return self.image

    async def generate_landing_page_html(self, data):
        self.page_calls.append(data)
        if self.page_gates:
            await self.page_gates.pop(0).wait()
        if self.page_error is not None:
            raise self.page_error
        return self.html


class FakeModels:
    """Async ``client.aio.models`` surface of google-genai."""

    def __init__(self, images_response=None, content_response=None, error=None):
        self.images_response = images_response
        self.content_response = content_response
        self.error = error
        self.generate_images_calls = []
        self.generate_content_calls = []

    async def generate_images(self, **kwargs):
        self.generate_images_calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.images_response

    async def generate_content(self, **kwargs):
        self.generate_content_calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.content_response


class FakeChatModel:
    """Chat model returning a canned reply."""

    def __init__(self, reply: str = PAGE_HTML, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def ainvoke(self, messages, **kwargs):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return AIMessage(content=self.reply)


def images_response(*payloads: bytes):
    return SimpleNamespace(
        generated_images=[SimpleNamespace(image=SimpleNamespace(image_bytes=p)) for p in payloads]
    )


def content_response(*parts):
    return SimpleNamespace(
        candidates=[SimpleNamespace(content=SimpleNamespace(parts=list(parts)))]
    )


def fake_genai(models: FakeModels):
    return SimpleNamespace(aio=SimpleNamespace(models=models))


def run(coro):
    return asyncio.run(coro)


@pytest.fixture(autouse=True)
def quiet_logger():
    """Keep the LLM logger silent unless a test configures it."""
    logger = get_logger()
    logger.configure(level="NONE", log_to_file=False)
    yield logger
    logger.configure(level="NONE", log_to_file=False)


@pytest.fixture
def settings():
    return GenerationSettings(api_key="test-key")


@pytest.fixture
def png_bytes():
    return make_image_bytes("PNG")


@pytest.fixture
def jpeg_bytes():
    return make_image_bytes("JPEG", color="blue")


@pytest.fixture
def cafe_sol():
    return BusinessFormData.create(
        name="Café Sol",
        industry="Food",
        description="cozy cafe",
        sells="coffee, pastries",
        phone="5215512345678",
        images=[],
    )


@pytest.fixture
def cafe_with_images(png_bytes, jpeg_bytes):
    return BusinessFormData.create(
        name="Café Sol",
        industry="Food",
        description="cozy cafe",
        sells="coffee, pastries",
        images=[encode_data_uri(png_bytes, "image/png"), encode_data_uri(jpeg_bytes, "image/jpeg")],
    )
