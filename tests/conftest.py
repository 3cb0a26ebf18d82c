import os
import tempfile
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

# logo_cli.config reads these at import time.
os.environ.setdefault("LOGO_OUTPUT_DIR", tempfile.mkdtemp(prefix="logo-cli-output-"))
os.environ.setdefault("LOGO_CONFIG_PATH", os.path.join(tempfile.mkdtemp(prefix="logo-cli-config-"), "config.json"))

from logo_cli.schemas import (  # noqa: E402
    GenerationResult,
    ImageQuality,
    ImageSize,
    LogoMetadata,
    LogoStyle,
)
from logo_cli.services.retry import RetryStrategy  # noqa: E402

IMAGE_URL = "https://images.example.com/logo.png"


def _image_response(url=IMAGE_URL, revised_prompt="A refined logo prompt"):
    return SimpleNamespace(data=[SimpleNamespace(url=url, revised_prompt=revised_prompt)])


@pytest.fixture
def image_response():
    return _image_response


@pytest.fixture
def openai_client():
    """Stand-in for AsyncOpenAI with a canned images.generate response."""
    client = MagicMock()
    client.images.generate = AsyncMock(return_value=_image_response())
    return client


@pytest.fixture
def fast_retry():
    return RetryStrategy(sleep=AsyncMock())


@pytest.fixture
def make_result():
    def _make(
        company="Acme",
        logo_id="logo_lp0abc12_deadbeef",
        style=LogoStyle.MODERN,
        quality=ImageQuality.STANDARD,
        cost=0.07,
        timestamp=1_700_000_000_000,
        url=IMAGE_URL,
    ):
        return GenerationResult(
            url=url,
            revised_prompt="A refined logo prompt",
            metadata=LogoMetadata(
                id=logo_id,
                timestamp=timestamp,
                company=company,
                original_prompt="bold new idea",
                final_prompt=f"Contemporary minimalist logo of {company}, bold new idea",
                style=style,
                size=ImageSize.SQUARE,
                quality=quality,
                cost=cost,
            ),
        )

    return _make
