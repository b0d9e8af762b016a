"""
Prescription image analysis.
Normalizes the uploaded image and hands it to the configured provider.
The result is returned to the caller; persisting it is a separate step.
"""

import logging
from typing import Optional

from rxanalysis.services.contract import ExtractionResult
from rxanalysis.services.image_normalizer import normalize_image
from rxanalysis.services.providers.base_provider import ExtractionProvider

logger = logging.getLogger("rxanalysis.analysis")


def analyze_prescription(
    provider: ExtractionProvider,
    image_base64: Optional[str],
    max_length: Optional[int] = None,
) -> ExtractionResult:
    """
    Full analysis pipeline.
    1. Strip the data-URI prefix and validate the payload.
    2. Extract structured data through the provider.
    3. Return the contract-shaped result.
    """
    payload = normalize_image(image_base64, max_length=max_length)
    result = provider.analyze_image(payload)
    logger.info(
        "Prescription analyzed (%s mode): %d medication(s) found",
        provider.mode, len(result.medications),
    )
    return result
