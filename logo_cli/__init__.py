"""Generate logos from text descriptions with the OpenAI Images API."""

__version__ = "1.0.0"
