"""
Base class for extraction providers.
Every provider answers the same three questions and returns data already
coerced into the structured response contract.
"""

from abc import ABC, abstractmethod

from rxanalysis.services.contract import ExtractionResult, InteractionReport, MedicationInfo


class ExtractionProvider(ABC):
    """Abstract capability surface for prescription AI calls."""

    @property
    @abstractmethod
    def mode(self) -> str:
        """'live' or 'demo'."""
        ...

    @abstractmethod
    def analyze_image(self, image_base64: str) -> ExtractionResult:
        """Extract structured prescription data from a bare base64 image."""
        ...

    @abstractmethod
    def check_interactions(self, medications: list[str]) -> InteractionReport:
        """Return pairwise interaction findings for the given names."""
        ...

    @abstractmethod
    def get_medication_info(self, medication_name: str) -> MedicationInfo:
        """Return a detailed information record for one medication."""
        ...
