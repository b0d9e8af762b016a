"""
Demo extraction provider – deterministic fixture data.
Used whenever live credentials are absent or disabled, so the whole
pipeline runs offline, for free, and identically on every call.
"""

import copy

from rxanalysis.services.contract import (
    ExtractionResult,
    InteractionReport,
    MedicationInfo,
    SideEffects,
)
from rxanalysis.services.providers.base_provider import ExtractionProvider

DEMO_ANALYSIS = {
    "medications": [
        {
            "name": "Metformin",
            "dosage": "500mg",
            "frequency": "Twice daily",
            "duration": "3 months",
            "instructions": "Take with meals",
        },
        {
            "name": "Lisinopril",
            "dosage": "10mg",
            "frequency": "Once daily",
            "duration": "Ongoing",
            "instructions": "Take in the morning",
        },
    ],
    "patientInfo": {
        "name": "John Doe",
        "age": "45",
        "gender": "Male",
    },
    "doctorInfo": {
        "name": "Dr. Jane Smith",
        "credentials": "MD, Internal Medicine",
    },
    "additionalNotes": "Follow up in 3 months. Monitor blood pressure weekly.",
}

DEMO_INTERACTIONS = {
    "interactions": [
        {
            "drugs": ["Metformin", "Ibuprofen"],
            "severity": "Moderate",
            "description": "May increase the risk of lactic acidosis",
            "recommendation": "Monitor closely if both drugs must be used together",
        }
    ],
    "generalPrecautions": (
        "Always consult with your healthcare provider or pharmacist before combining medications."
    ),
}

# Curated records keyed by a lowercase substring of the queried name
KNOWN_MEDICATIONS = {
    "metformin": {
        "name": "Metformin",
        "category": "Biguanide Antidiabetic",
        "uses": [
            "Type 2 diabetes management",
            "Insulin resistance",
            "Polycystic ovary syndrome (PCOS)",
        ],
        "sideEffects": {
            "common": [
                "Nausea",
                "Diarrhea",
                "Stomach upset",
                "Metallic taste",
            ],
            "severe": [
                "Lactic acidosis (rare but serious)",
                "Vitamin B12 deficiency with long-term use",
                "Hypoglycemia (when combined with other diabetes medications)",
            ],
        },
        "precautions": [
            "Not recommended for patients with kidney disease",
            "Should be temporarily discontinued before procedures using contrast dye",
            "Avoid excessive alcohol consumption",
            "Use caution in elderly patients",
        ],
        "properUsage": (
            "Take with meals to reduce gastrointestinal side effects. "
            "Start with a low dose and gradually increase as tolerated."
        ),
        "storage": "Store at room temperature away from moisture and heat.",
    },
}


def _generic_medication_info(medication_name: str) -> MedicationInfo:
    return MedicationInfo(
        name=medication_name,
        category="Prescription Medication",
        uses=["Treatment of medical conditions as prescribed by healthcare provider"],
        side_effects=SideEffects(
            common=[
                "Varies depending on medication type",
                "May include headache",
                "Nausea",
                "Dizziness",
            ],
            severe=[
                "Always consult medication guide for potential severe side effects",
                "Contact healthcare provider if experiencing unusual symptoms",
            ],
        ),
        precautions=[
            "Take as prescribed by healthcare provider",
            "Inform provider of all other medications you're taking",
            "Discuss any allergies or medical conditions before starting",
        ],
        proper_usage=(
            "Follow healthcare provider's instructions carefully. "
            "Do not adjust dosage without consulting your provider."
        ),
        storage="Store at room temperature away from moisture and heat unless otherwise directed.",
    )


class DemoExtractionProvider(ExtractionProvider):

    @property
    def mode(self) -> str:
        return "demo"

    def analyze_image(self, image_base64: str) -> ExtractionResult:
        return ExtractionResult.from_dict(copy.deepcopy(DEMO_ANALYSIS))

    def check_interactions(self, medications: list[str]) -> InteractionReport:
        return InteractionReport.from_dict(copy.deepcopy(DEMO_INTERACTIONS))

    def get_medication_info(self, medication_name: str) -> MedicationInfo:
        lowered = medication_name.lower()
        for key, record in KNOWN_MEDICATIONS.items():
            if key in lowered:
                return MedicationInfo.from_dict(copy.deepcopy(record))
        return _generic_medication_info(medication_name)
