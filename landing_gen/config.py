"""
Runtime configuration loaded from the environment.
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from landing_gen.errors import MissingCredentialError

PLACEHOLDER_TOKEN = "IMAGE_PLACEHOLDER"

# Checked in order; the first non-empty value wins.
API_KEY_VARIABLES = ("GEMINI_API_KEY", "API_KEY", "GOOGLE_API_KEY")


class GenerationSettings(BaseModel):
    """Settings for the generation service."""
    api_key: Optional[str] = None
    image_model: str = "gemini-2.5-flash-image-preview"
    imagen_model: str = "imagen-4.0-generate-001"
    text_model: str = "gemini-2.5-flash"
    temperature: float = 0.7
    page_language: str = "Spanish"
    placeholder_token: str = PLACEHOLDER_TOKEN

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "GenerationSettings":
        """
        Read settings from environment variables (and a .env file).

        Args:
            load_env_file: Whether to load a .env file first.

        Returns:
            GenerationSettings instance. The API key may still be missing;
            callers that need it use require_api_key().
        """
        if load_env_file:
            load_dotenv()

        api_key = None
        for variable in API_KEY_VARIABLES:
            value = os.getenv(variable, "").strip()
            if value:
                api_key = value
                break

        defaults = cls()
        return cls(
            api_key=api_key,
            image_model=os.getenv("IMAGE_MODEL", defaults.image_model),
            imagen_model=os.getenv("IMAGEN_MODEL", defaults.imagen_model),
            text_model=os.getenv("TEXT_MODEL", defaults.text_model),
            temperature=float(os.getenv("TEXT_TEMPERATURE", str(defaults.temperature))),
            page_language=os.getenv("PAGE_LANGUAGE", defaults.page_language),
        )

    def require_api_key(self) -> str:
        if not self.api_key:
            names = ", ".join(API_KEY_VARIABLES)
            raise MissingCredentialError(f"API key not set (expected one of: {names})")
        return self.api_key
