"""
Live extraction provider backed by OpenAI chat completions.
Vision input for prescription images, JSON-object responses for all calls.
Failures surface as ExtractionProviderError; there is no fallback to demo data.
"""

import json
import logging
from typing import Optional

from openai import OpenAI, OpenAIError

from rxanalysis.errors import ExtractionProviderError
from rxanalysis.services import prompts
from rxanalysis.services.contract import ExtractionResult, InteractionReport, MedicationInfo
from rxanalysis.services.providers.base_provider import ExtractionProvider

logger = logging.getLogger("rxanalysis.providers.openai")


class OpenAIExtractionProvider(ExtractionProvider):

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        max_tokens: int = 1000,
        timeout_s: float = 30.0,
        client: Optional[OpenAI] = None,
    ):
        if not api_key:
            raise ValueError("An OpenAI API key is required for live mode.")
        self.model = model
        self.max_tokens = max_tokens
        # Paid calls: bounded, never retried behind the caller's back
        self._client = client or OpenAI(api_key=api_key, timeout=timeout_s, max_retries=0)

    @property
    def mode(self) -> str:
        return "live"

    def _complete_json(self, operation: str, system: str, user_content) -> dict:
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user_content},
                ],
                temperature=0,
                max_tokens=self.max_tokens,
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            logger.error("OpenAI %s call failed: %s", operation, e)
            raise ExtractionProviderError(operation, str(e)) from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ExtractionProviderError(operation, "empty response from model")
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            logger.error("OpenAI %s returned invalid JSON: %s", operation, content[:200])
            raise ExtractionProviderError(operation, f"invalid JSON from model: {e}") from e

    def analyze_image(self, image_base64: str) -> ExtractionResult:
        user_content = [
            {"type": "text", "text": prompts.ANALYSIS_USER_PROMPT},
            {
                "type": "image_url",
                "image_url": {"url": f"data:image/jpeg;base64,{image_base64}"},
            },
        ]
        data = self._complete_json("analyze", prompts.ANALYSIS_SYSTEM_PROMPT, user_content)
        return ExtractionResult.from_dict(data)

    def check_interactions(self, medications: list[str]) -> InteractionReport:
        user_content = prompts.INTERACTIONS_USER_PROMPT.format(medications=", ".join(medications))
        data = self._complete_json("interactions", prompts.INTERACTIONS_SYSTEM_PROMPT, user_content)
        return InteractionReport.from_dict(data)

    def get_medication_info(self, medication_name: str) -> MedicationInfo:
        user_content = prompts.MEDICATION_INFO_USER_PROMPT.format(medication_name=medication_name)
        data = self._complete_json(
            "medication_info", prompts.MEDICATION_INFO_SYSTEM_PROMPT, user_content
        )
        return MedicationInfo.from_dict(data, fallback_name=medication_name)
