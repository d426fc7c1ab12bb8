"""
Exception types raised by the landing page generation pipeline.
"""


class LandingGenError(Exception):
    """Base class for all pipeline errors."""


class ValidationError(LandingGenError):
    """Business form data is malformed."""


class TransportError(LandingGenError):
    """The generation service could not be reached or rejected the call."""


class GenerationError(LandingGenError):
    """The generation service answered but returned no usable payload."""


class MissingCredentialError(LandingGenError):
    """No API key is configured for the generation service."""


class ArtifactNotFoundError(LandingGenError, KeyError):
    """An artifact URL is unknown or has already been released."""
