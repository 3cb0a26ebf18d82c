import logging
import secrets
import time
from typing import Dict, List, Optional

import openai
from openai import AsyncOpenAI

from ..config import API_KEY_HINT, IMAGE_BACKGROUND, IMAGE_MODEL
from ..errors import ConfigurationError, UpstreamError, UpstreamErrorKind
from ..schemas import (
    GenerationOptions,
    GenerationRequest,
    GenerationResult,
    ImageQuality,
    ImageSize,
    LogoMetadata,
    LogoStyle,
)
from .cache import CacheStore, derive_key
from .prompts import PromptEngine, variation_prompt
from .retry import RetryStrategy

logger = logging.getLogger(__name__)

# Price per image by quality tier; used for metadata, batch totals and dry-run estimates.
COST_PER_IMAGE: Dict[ImageQuality, float] = {
    ImageQuality.STANDARD: 0.07,
    ImageQuality.HD: 0.19,
}

# gpt-image-1 names its tiers differently from the CLI.
API_QUALITY: Dict[ImageQuality, str] = {
    ImageQuality.STANDARD: "medium",
    ImageQuality.HD: "high",
}

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def calculate_cost(quality: Optional[ImageQuality]) -> float:
    return COST_PER_IMAGE.get(quality or ImageQuality.STANDARD, COST_PER_IMAGE[ImageQuality.STANDARD])


def _base36(number: int) -> str:
    digits = ""
    while number:
        number, remainder = divmod(number, 36)
        digits = _BASE36[remainder] + digits
    return digits or "0"


def generate_logo_id(timestamp_ms: Optional[int] = None) -> str:
    """Return an id like ``logo_<base36 ms>_<8 hex chars>``."""
    timestamp_ms = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    return f"logo_{_base36(timestamp_ms)}_{secrets.token_hex(4)}"


def translate_openai_error(exc: openai.OpenAIError) -> UpstreamError:
    """Tag a raw OpenAI client error with the retry kind it belongs to."""
    if isinstance(exc, openai.RateLimitError):
        kind = UpstreamErrorKind.RATE_LIMITED
    elif isinstance(exc, (openai.APITimeoutError, openai.APIConnectionError)):
        kind = UpstreamErrorKind.TRANSIENT
    else:
        kind = UpstreamErrorKind.FATAL
    return UpstreamError(f"OpenAI error: {exc}", kind=kind)


class LogoGenerator:
    """Generates logos through the OpenAI Images API."""

    def __init__(
        self,
        client: AsyncOpenAI | None = None,
        cache: CacheStore | None = None,
        retry: RetryStrategy | None = None,
        prompt_engine: PromptEngine | None = None,
        api_key: str | None = None,
    ):
        if client is None:
            try:
                client = AsyncOpenAI(api_key=api_key)
            except openai.OpenAIError as exc:
                raise ConfigurationError("OpenAI API key is required", hint=API_KEY_HINT) from exc
        self.client = client
        self.cache = cache
        self.retry = retry or RetryStrategy()
        self.prompt_engine = prompt_engine or PromptEngine()

    async def generate(
        self,
        request: GenerationRequest,
        options: GenerationOptions | None = None,
    ) -> GenerationResult:
        options = options or GenerationOptions()
        # Template errors surface here, before any network call.
        final_prompt = self.prompt_engine.build_prompt(request, options)

        style = options.style or request.style or LogoStyle.MODERN
        colors = options.colors or request.colors
        cache_key = derive_key(request.company, request.prompt, style.value, colors)

        if self.cache is not None:
            cached = await self.cache.get(cache_key)
            if cached is not None:
                logger.info("Cache hit for %s (%s)", request.company, cache_key)
                return cached.to_result()

        size = options.size or request.size or ImageSize.SQUARE
        quality = options.quality or request.quality or ImageQuality.STANDARD

        url, revised_prompt = await self.retry.execute(
            lambda: self._request_image(final_prompt, size, quality)
        )

        timestamp = int(time.time() * 1000)
        result = GenerationResult(
            url=url,
            revised_prompt=revised_prompt,
            metadata=LogoMetadata(
                id=generate_logo_id(timestamp),
                timestamp=timestamp,
                company=request.company,
                original_prompt=request.prompt,
                final_prompt=final_prompt,
                style=style,
                industry=options.industry or request.industry,
                size=size,
                quality=quality,
                cost=calculate_cost(quality),
            ),
        )

        if self.cache is not None:
            await self.cache.set(cache_key, result)
        return result

    async def generate_variations(
        self,
        request: GenerationRequest,
        count: int = 3,
        options: GenerationOptions | None = None,
    ) -> List[GenerationResult]:
        """Generate a base logo, then ``count - 1`` variations of its revised prompt."""
        base = await self.generate(request, options)
        results = [base]
        base_prompt = base.revised_prompt or request.prompt
        for index in range(1, count):
            varied = request.model_copy(update={"prompt": variation_prompt(base_prompt, index)})
            results.append(await self.generate(varied, options))
        return results

    async def _request_image(self, prompt: str, size: ImageSize, quality: ImageQuality):
        try:
            response = await self.client.images.generate(
                model=IMAGE_MODEL,
                prompt=prompt,
                n=1,
                size=size.value,
                quality=API_QUALITY[quality],
                background=IMAGE_BACKGROUND,
                response_format="url",
            )
        except openai.OpenAIError as exc:
            raise translate_openai_error(exc) from exc

        if not response.data:
            raise UpstreamError("No image generated from OpenAI")
        image = response.data[0]
        if not image.url:
            raise UpstreamError("No URL returned from OpenAI API. Please try again.")
        return image.url, image.revised_prompt
