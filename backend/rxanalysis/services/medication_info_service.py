"""
Medication information lookup through the configured provider.
"""

from rxanalysis.errors import ValidationError
from rxanalysis.services.contract import MedicationInfo
from rxanalysis.services.providers.base_provider import ExtractionProvider


def resolve_medication_info(provider: ExtractionProvider, medication_name: str) -> MedicationInfo:
    if not isinstance(medication_name, str) or not medication_name.strip():
        raise ValidationError("Medication name is required")
    return provider.get_medication_info(medication_name)
