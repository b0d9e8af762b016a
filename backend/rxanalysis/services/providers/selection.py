"""
Provider selection – decided once, when the app is built.

Live mode requires BOTH a non-empty OPENAI_API_KEY and USE_OPENAI_API=true.
Anything else yields the demo provider. The chosen instance is stored on
the Flask app and never re-evaluated per request.
"""

import logging
from typing import Mapping

from flask import current_app

from rxanalysis.services.prompts import PROMPT_VERSION
from rxanalysis.services.providers.base_provider import ExtractionProvider
from rxanalysis.services.providers.demo_provider import DemoExtractionProvider
from rxanalysis.services.providers.openai_provider import OpenAIExtractionProvider

logger = logging.getLogger("rxanalysis.providers")

EXTENSION_KEY = "extraction_provider"


def build_provider(settings: Mapping) -> ExtractionProvider:
    """Build the process-wide provider from app settings."""
    api_key = (settings.get("OPENAI_API_KEY") or "").strip()
    enabled = bool(settings.get("USE_OPENAI_API"))

    if api_key and enabled:
        provider = OpenAIExtractionProvider(
            api_key=api_key,
            model=settings.get("OPENAI_MODEL", "gpt-4o"),
            max_tokens=int(settings.get("OPENAI_MAX_TOKENS", 1000)),
            timeout_s=float(settings.get("OPENAI_TIMEOUT_S", 30)),
        )
        logger.info(
            "OpenAI extraction provider initialized (model=%s, prompts=%s) - LIVE MODE",
            provider.model, PROMPT_VERSION,
        )
        return provider

    if enabled and not api_key:
        logger.warning("USE_OPENAI_API is set but OPENAI_API_KEY is empty; falling back to demo data.")
    logger.info("Using demonstration data for AI responses - DEMO MODE")
    return DemoExtractionProvider()


def get_provider() -> ExtractionProvider:
    """Return the provider bound to the current Flask app."""
    return current_app.extensions[EXTENSION_KEY]
