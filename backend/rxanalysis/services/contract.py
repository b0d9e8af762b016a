"""
Structured response contract shared by every provider call.

Live responses are coerced through these dataclasses before anything
downstream sees them, so storage and the verification UI can rely on one
shape: strings default to "" and lists to [], never None.
"""

import enum
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from rxanalysis.errors import ExtractionProviderError


class Severity(str, enum.Enum):
    """Ordered interaction severity scale."""
    LOW = "Low"
    MODERATE = "Moderate"
    SEVERE = "Severe"

    @property
    def rank(self) -> int:
        return list(type(self)).index(self)

    @classmethod
    def parse(cls, value: Any) -> "Severity":
        """
        Whole-word alias match. Negated terms ("not severe") are ignored and
        a range ("low to moderate") resolves to its highest level.
        """
        text = _str(value).lower()
        found = [
            _SEVERITY_ALIASES[m.group(1)]
            for m in _SEVERITY_WORD.finditer(text)
            if not _NEGATION.search(text[:m.start()])
        ]
        if not found:
            return cls.MODERATE
        return max(found, key=lambda s: s.rank)


_SEVERITY_ALIASES = {
    "severe": Severity.SEVERE,
    "major": Severity.SEVERE,
    "serious": Severity.SEVERE,
    "high": Severity.SEVERE,
    "contraindicated": Severity.SEVERE,
    "moderate": Severity.MODERATE,
    "medium": Severity.MODERATE,
    "low": Severity.LOW,
    "mild": Severity.LOW,
    "minor": Severity.LOW,
}

_SEVERITY_WORD = re.compile(r"\b(" + "|".join(_SEVERITY_ALIASES) + r")\b")
_NEGATION = re.compile(r"\b(?:not|non|no)[\s-]*$")


def _str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def _str_list(value: Any, operation: str, field_name: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if not isinstance(value, list):
        raise ExtractionProviderError(
            operation, f"response field '{field_name}' must be a list"
        )
    return [_str(v) for v in value if _str(v).strip()]


def _obj(value: Any, operation: str, field_name: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ExtractionProviderError(
            operation, f"response field '{field_name}' must be an object"
        )
    return value


def _require_object(data: Any, operation: str) -> dict:
    if not isinstance(data, dict):
        raise ExtractionProviderError(operation, "response is not a JSON object")
    return data


# ── Extraction ────────────────────────────────────────────────────────────

@dataclass
class MedicationEntry:
    name: str = ""
    dosage: str = ""
    frequency: str = ""
    duration: str = ""
    instructions: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "MedicationEntry":
        data = _obj(data, "analyze", "medications[]")
        return cls(
            name=_str(data.get("name")),
            dosage=_str(data.get("dosage")),
            frequency=_str(data.get("frequency")),
            duration=_str(data.get("duration")),
            instructions=_str(data.get("instructions")),
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "dosage": self.dosage,
            "frequency": self.frequency,
            "duration": self.duration,
            "instructions": self.instructions,
        }


@dataclass
class PatientInfo:
    name: str = ""
    age: str = ""
    gender: str = ""


@dataclass
class DoctorInfo:
    name: str = ""
    credentials: str = ""


@dataclass
class ExtractionResult:
    medications: list[MedicationEntry] = field(default_factory=list)
    patient_info: PatientInfo = field(default_factory=PatientInfo)
    doctor_info: DoctorInfo = field(default_factory=DoctorInfo)
    additional_notes: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "ExtractionResult":
        data = _require_object(data, "analyze")
        meds = data.get("medications")
        if meds is None:
            meds = []
        if not isinstance(meds, list):
            raise ExtractionProviderError("analyze", "response field 'medications' must be a list")
        patient = _obj(data.get("patientInfo"), "analyze", "patientInfo")
        doctor = _obj(data.get("doctorInfo"), "analyze", "doctorInfo")
        return cls(
            medications=[MedicationEntry.from_dict(m) for m in meds],
            patient_info=PatientInfo(
                name=_str(patient.get("name")),
                age=_str(patient.get("age")),
                gender=_str(patient.get("gender")),
            ),
            doctor_info=DoctorInfo(
                name=_str(doctor.get("name")),
                credentials=_str(doctor.get("credentials")),
            ),
            additional_notes=_str(data.get("additionalNotes")),
        )

    def to_dict(self) -> dict:
        return {
            "medications": [m.to_dict() for m in self.medications],
            "patientInfo": {
                "name": self.patient_info.name,
                "age": self.patient_info.age,
                "gender": self.patient_info.gender,
            },
            "doctorInfo": {
                "name": self.doctor_info.name,
                "credentials": self.doctor_info.credentials,
            },
            "additionalNotes": self.additional_notes,
        }


# ── Interactions ──────────────────────────────────────────────────────────

@dataclass
class InteractionFinding:
    drugs: list[str]
    severity: Severity
    description: str = ""
    recommendation: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> Optional["InteractionFinding"]:
        """Coerce one finding; returns None when fewer than two drugs are named."""
        data = _obj(data, "interactions", "interactions[]")
        drugs = _str_list(data.get("drugs"), "interactions", "drugs")
        if len(drugs) < 2:
            return None
        return cls(
            drugs=drugs,
            severity=Severity.parse(data.get("severity")),
            description=_str(data.get("description")),
            recommendation=_str(data.get("recommendation")),
        )

    def to_dict(self) -> dict:
        return {
            "drugs": list(self.drugs),
            "severity": self.severity.value,
            "description": self.description,
            "recommendation": self.recommendation,
        }


@dataclass
class InteractionReport:
    interactions: list[InteractionFinding] = field(default_factory=list)
    general_precautions: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "InteractionReport":
        data = _require_object(data, "interactions")
        raw = data.get("interactions")
        if raw is None:
            raw = []
        if not isinstance(raw, list):
            raise ExtractionProviderError("interactions", "response field 'interactions' must be a list")
        findings = [InteractionFinding.from_dict(item) for item in raw]
        return cls(
            interactions=[f for f in findings if f is not None],
            general_precautions=_str(data.get("generalPrecautions")),
        )

    def sorted_by_severity(self) -> "InteractionReport":
        ordered = sorted(self.interactions, key=lambda f: f.severity.rank, reverse=True)
        return InteractionReport(interactions=ordered, general_precautions=self.general_precautions)

    def to_dict(self) -> dict:
        return {
            "interactions": [f.to_dict() for f in self.interactions],
            "generalPrecautions": self.general_precautions,
        }


# ── Medication info ───────────────────────────────────────────────────────

@dataclass
class SideEffects:
    common: list[str] = field(default_factory=list)
    severe: list[str] = field(default_factory=list)


@dataclass
class MedicationInfo:
    name: str
    category: str = ""
    uses: list[str] = field(default_factory=list)
    side_effects: SideEffects = field(default_factory=SideEffects)
    precautions: list[str] = field(default_factory=list)
    proper_usage: str = ""
    storage: str = ""

    @classmethod
    def from_dict(cls, data: Any, fallback_name: str = "") -> "MedicationInfo":
        op = "medication_info"
        data = _require_object(data, op)
        side = _obj(data.get("sideEffects"), op, "sideEffects")
        return cls(
            name=_str(data.get("name")).strip() or fallback_name,
            category=_str(data.get("category")),
            uses=_str_list(data.get("uses"), op, "uses"),
            side_effects=SideEffects(
                common=_str_list(side.get("common"), op, "sideEffects.common"),
                severe=_str_list(side.get("severe"), op, "sideEffects.severe"),
            ),
            precautions=_str_list(data.get("precautions"), op, "precautions"),
            proper_usage=_str(data.get("properUsage")),
            storage=_str(data.get("storage")),
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "category": self.category,
            "uses": list(self.uses),
            "sideEffects": {
                "common": list(self.side_effects.common),
                "severe": list(self.side_effects.severe),
            },
            "precautions": list(self.precautions),
            "properUsage": self.proper_usage,
            "storage": self.storage,
        }
