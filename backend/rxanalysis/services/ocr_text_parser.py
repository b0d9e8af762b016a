"""
Heuristic parser for already-OCR'd prescription text.

Works line by line without any AI call, so it is available in both modes:
  - first date-like token          → additionalNotes ("Date: ...")
  - first line mentioning a doctor → doctorInfo.name
  - "Name:" / "Patient:" / "Age:"  → patientInfo
  - lines carrying a strength unit or an "N x M" count → medications
Handles English and French prescription labels.
"""

import re

from rxanalysis.services.contract import DoctorInfo, ExtractionResult, MedicationEntry, PatientInfo

_DATE = re.compile(
    r"\b(\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4})\b"
    r"|(lundi|mardi|mercredi|jeudi|vendredi|samedi|dimanche)\b.+\d{1,2}.+\d{4}",
    re.IGNORECASE,
)
_DOCTOR = re.compile(r"(^|\s)(Dr\.?|Doctor|Docteur|Médecin)(\s|$)", re.IGNORECASE)
_PATIENT_NAME = re.compile(r"^(nom|name|patient)\s*[:.]\s*", re.IGNORECASE)
_PATIENT_AGE = re.compile(r"^(âge|age)\s*[:.]\s*", re.IGNORECASE)
_GENDER = re.compile(r"^(sex|sexe|gender)\s*[:.]\s*", re.IGNORECASE)

_MEDICATION_LINE = re.compile(
    r"(\b\d+(?:[.,]\d+)?\s*(mg|ml|g|mcg|ui|µg)\b|[\d½¼¾]+\s*[x×]\s*\d+)", re.IGNORECASE
)
_DOSAGE = re.compile(
    r"(\d+(?:[.,]\d+)?\s*(mg|ml|g|mcg|ui|µg)\b)"
    r"|(\d+\s*[x×]\s*\d+\s*(comprimé|cp|goutte|ml|tab|tablet)s?\b)"
    r"|(\d+\s*(fois\s*par\s*jour|times\s*(a|per)\s*day))",
    re.IGNORECASE,
)
_FREQUENCY = re.compile(
    r"\b(once|twice|thrice|\d+\s*times)\s*(a|per)?\s*(day|daily|week)\b"
    r"|\b(OD|BID|TID|QID|PRN|QHS)\b"
    r"|\b\d+\s*fois\s*par\s*(jour|semaine)\b",
    re.IGNORECASE,
)
_DURATION = re.compile(
    r"\b(for\s+)?\d+\s*(days?|weeks?|months?|jours?|semaines?|mois)\b", re.IGNORECASE
)
_NAME_START = re.compile(r"^[A-ZÀ-ÿ]")

UNKNOWN_MEDICATION = "Unidentified medication"
UNKNOWN_DOSAGE = "Dosage not specified"
DEFAULT_INSTRUCTIONS = "Take as prescribed"


def _first(pattern: re.Pattern, line: str) -> str:
    m = pattern.search(line)
    return m.group(0).strip() if m else ""


def _medication_from_line(line: str) -> MedicationEntry:
    dosage = _first(_DOSAGE, line)
    frequency = _first(_FREQUENCY, line)
    duration = _first(_DURATION, line)

    # Name: leading words up to the first token that starts with a digit
    name_tokens = []
    for token in line.split():
        if token[0].isdigit():
            break
        name_tokens.append(token)
    name = " ".join(name_tokens).strip(" -:,")
    if not _NAME_START.match(name):
        name = ""

    remainder = line
    for part in (name, dosage, frequency, duration):
        if part:
            remainder = remainder.replace(part, " ", 1)
    instructions = re.sub(r"\s{2,}", " ", remainder).strip(" -:,")

    return MedicationEntry(
        name=name or UNKNOWN_MEDICATION,
        dosage=dosage or UNKNOWN_DOSAGE,
        frequency=frequency,
        duration=duration,
        instructions=instructions or DEFAULT_INSTRUCTIONS,
    )


def parse_prescription_text(text: str) -> ExtractionResult:
    """Parse OCR output into the extraction result shape."""
    lines = [line.strip() for line in (text or "").replace("\r\n", "\n").split("\n")]
    lines = [line for line in lines if line]

    patient = PatientInfo()
    doctor = DoctorInfo()
    medications = []
    date = ""

    for line in lines:
        if not date:
            date = _first(_DATE, line)

        if not doctor.name and _DOCTOR.search(line):
            doctor.name = line
            continue

        if _PATIENT_NAME.match(line):
            patient.name = _PATIENT_NAME.sub("", line).strip()
            continue
        if _PATIENT_AGE.match(line):
            patient.age = _PATIENT_AGE.sub("", line).strip()
            continue
        if _GENDER.match(line):
            patient.gender = _GENDER.sub("", line).strip()
            continue

        if _MEDICATION_LINE.search(line):
            medications.append(_medication_from_line(line))

    return ExtractionResult(
        medications=medications,
        patient_info=patient,
        doctor_info=doctor,
        additional_notes=f"Date: {date}" if date else "",
    )
