"""
Generation client for the illustrative image and the landing page HTML.

Images come from the google-genai SDK (Gemini image model for image-to-image,
Imagen for text-to-image); the page comes from a LangChain Gemini chat model.
"""

import asyncio
import base64
import re
import time
from typing import Any, List, Optional

from google import genai
from google.genai import types
from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from landing_gen.config import GenerationSettings
from landing_gen.errors import GenerationError, TransportError
from landing_gen.io.image_loader import decode_data_uri
from landing_gen.models import BusinessFormData
from landing_gen.pipeline.prompts import build_image_prompt, build_page_prompt
from landing_gen.utils.llm_logger import LoggedLLM, get_logger, message_text

PROVIDER = "google"

_LEADING_FENCE = re.compile(r"^```[\w+-]*[ \t]*(?:\r?\n)?")
_TRAILING_FENCE = re.compile(r"(?:\r?\n)?```$")


class ResponseParser:
    """Parses model responses to extract HTML content."""

    @staticmethod
    def extract_html(response_text: str) -> str:
        """
        Strip a wrapping markdown code fence from a model response.

        Leading fences (with optional language tag) and trailing fences are
        removed layer by layer, trimming whitespace in between, until the text
        no longer starts or ends with one. Applying this twice is the same as
        applying it once.

        Args:
            response_text: Raw model response.

        Returns:
            HTML content.
        """
        text = (response_text or "").strip()
        while True:
            stripped = _LEADING_FENCE.sub("", text, count=1)
            stripped = _TRAILING_FENCE.sub("", stripped, count=1).strip()
            if stripped == text:
                return text
            text = stripped


def first_inline_image(response: Any) -> Optional[bytes]:
    """Return the first inline image payload of a generate_content response."""
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline_data = getattr(part, "inline_data", None)
            if inline_data is not None and inline_data.data:
                data = inline_data.data
                if isinstance(data, str):
                    data = base64.b64decode(data)
                return data
    return None


class GenerationClient:
    """Calls the generation service for hero images and landing pages."""

    def __init__(
        self,
        settings: GenerationSettings,
        genai_client: Optional[Any] = None,
        llm: Optional[Any] = None,
        session_id: Optional[str] = None,
    ):
        """
        Initialize the client.

        Args:
            settings: Service settings. The API key is required.
            genai_client: google-genai client (created from settings if omitted).
            llm: Chat model for page generation (created from settings if omitted).
            session_id: Optional ID used to group call logs.
        """
        api_key = settings.require_api_key()
        self.settings = settings
        self.session_id = session_id
        self.parser = ResponseParser()
        self.logger = get_logger()

        self.genai = genai_client or genai.Client(api_key=api_key)
        self.llm = llm or LoggedLLM(
            llm_instance=ChatGoogleGenerativeAI(
                model=settings.text_model,
                temperature=settings.temperature,
                google_api_key=api_key,
            ),
            component="page_generator",
            provider=PROVIDER,
            model=settings.text_model,
            session_id=session_id,
        )

    @property
    def placeholder_token(self) -> str:
        return self.settings.placeholder_token

    async def generate_illustrative_image(self, data: BusinessFormData) -> bytes:
        """
        Generate the hero image for a business.

        Uses image-to-image generation when the form carries reference
        images, text-to-image otherwise.

        Returns:
            Raw image bytes (PNG for text-to-image).
        """
        if data.has_images:
            return await self._generate_image_from_references(data)
        return await self._generate_image_from_text(data)

    async def _generate_image_from_references(self, data: BusinessFormData) -> bytes:
        prompt = build_image_prompt(data)
        parts: List[Any] = []
        for image in data.images:
            mime_type, payload = decode_data_uri(image)
            parts.append(types.Part.from_bytes(data=payload, mime_type=mime_type))
        parts.append(types.Part.from_text(text=prompt))

        log_parts = [{"type": "image", "content": image} for image in data.images]
        log_parts.append({"type": "text", "content": prompt})

        response = await self._call(
            "image_from_references",
            self.settings.image_model,
            log_parts,
            self.genai.aio.models.generate_content(
                model=self.settings.image_model,
                contents=parts,
                config=types.GenerateContentConfig(response_modalities=["IMAGE", "TEXT"]),
            ),
        )

        image_bytes = first_inline_image(response)
        if not image_bytes:
            raise GenerationError("no image returned")
        return image_bytes

    async def _generate_image_from_text(self, data: BusinessFormData) -> bytes:
        prompt = build_image_prompt(data)
        response = await self._call(
            "image_from_text",
            self.settings.imagen_model,
            [{"type": "text", "content": prompt}],
            self.genai.aio.models.generate_images(
                model=self.settings.imagen_model,
                prompt=prompt,
                config=types.GenerateImagesConfig(
                    number_of_images=1,
                    output_mime_type="image/png",
                    aspect_ratio="16:9",
                ),
            ),
        )

        generated = getattr(response, "generated_images", None) or []
        if not generated:
            raise GenerationError("no image returned")
        image = generated[0].image
        if image is None or not image.image_bytes:
            raise GenerationError("no image returned")
        return image.image_bytes

    async def generate_landing_page_html(self, data: BusinessFormData) -> str:
        """
        Generate the landing page HTML for a business.

        The returned page references the hero image through the placeholder
        token; substituting the real image is up to the caller.
        """
        prompt = build_page_prompt(
            data,
            placeholder=self.settings.placeholder_token,
            language=self.settings.page_language,
        )

        try:
            response = await self.llm.ainvoke([HumanMessage(content=prompt)])
        except Exception as e:
            raise TransportError(f"Page generation call failed: {e}") from e

        html = self.parser.extract_html(message_text(getattr(response, "content", response)))
        if not html:
            raise GenerationError("no page returned")
        return html

    async def _call(self, component: str, model: str, log_parts: List[Any], request: Any) -> Any:
        """Await a google-genai request, logging it and wrapping failures."""
        invocation_id = await asyncio.to_thread(self._log_start, component, model, log_parts)

        start_time = time.time()
        try:
            response = await request
        except Exception as e:
            if invocation_id:
                await asyncio.to_thread(self.logger.log_error, invocation_id, component, e, self.session_id)
            raise TransportError(f"Image generation call failed: {e}") from e

        if invocation_id:
            await asyncio.to_thread(
                self.logger.log_response,
                invocation_id,
                component,
                PROVIDER,
                model,
                log_parts,
                response_content="[image response]",
                start_time=start_time,
                end_time=time.time(),
                session_id=self.session_id,
            )
        return response

    def _log_start(self, component: str, model: str, log_parts: List[Any]) -> str:
        invocation_id = self.logger.log_invocation(component, PROVIDER, model, self.session_id)
        if invocation_id:
            self.logger.log_request(
                invocation_id, component, PROVIDER, model, log_parts, session_id=self.session_id
            )
        return invocation_id
