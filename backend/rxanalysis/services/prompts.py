"""
Prompt templates for the live extraction provider.

Each template spells out the exact JSON shape the contract layer expects.
Bump PROMPT_VERSION whenever any template text changes.
"""

PROMPT_VERSION = "2024-05"

# ── Prescription image analysis ─────────────────────────────────────────────

ANALYSIS_SYSTEM_PROMPT = (
    "You are a pharmaceutical expert specializing in prescription analysis. "
    "Extract and analyze the information from the prescription image, including "
    "drug names, dosages, frequencies, durations, and any special instructions. "
    "Format your response as structured JSON."
)

ANALYSIS_USER_PROMPT = """Analyze this prescription image and extract the medicines, dosages, and instructions.

Return a JSON object with exactly this structure:
{
    "medications": [
        {
            "name": "drug name as written",
            "dosage": "e.g. '500mg'",
            "frequency": "e.g. 'Twice daily'",
            "duration": "e.g. '3 months'",
            "instructions": "e.g. 'Take with meals'"
        }
    ],
    "patientInfo": {"name": "", "age": "", "gender": ""},
    "doctorInfo": {"name": "", "credentials": ""},
    "additionalNotes": ""
}

RULES:
- Use an empty string for anything not visible. Never use null.
- If no medication can be read, return an empty "medications" list.
- Only extract what is present on the prescription. Do NOT guess."""


# ── Drug interactions ───────────────────────────────────────────────────────

INTERACTIONS_SYSTEM_PROMPT = (
    "You are a pharmaceutical expert specializing in drug interactions. "
    "Analyze the list of medications provided and identify potential interactions, "
    "side effects, and precautions. Format your response as structured JSON."
)

INTERACTIONS_USER_PROMPT = """Analyze these medications for potential interactions: {medications}.

Return a JSON object with exactly this structure:
{{
    "interactions": [
        {{
            "drugs": ["drug A", "drug B"],
            "severity": "Low" or "Moderate" or "Severe",
            "description": "one sentence",
            "recommendation": "what to do about it"
        }}
    ],
    "generalPrecautions": "general advice for this combination"
}}"""


# ── Medication information ──────────────────────────────────────────────────

MEDICATION_INFO_SYSTEM_PROMPT = (
    "You are a pharmaceutical expert with extensive knowledge of medications. "
    "Provide detailed, accurate information about medications, including uses, "
    "side effects, precautions, and proper administration. "
    "Format your response as structured JSON."
)

MEDICATION_INFO_USER_PROMPT = """Provide detailed information about {medication_name}.

Return a JSON object with exactly this structure:
{{
    "name": "",
    "category": "",
    "uses": [""],
    "sideEffects": {{"common": [""], "severe": [""]}},
    "precautions": [""],
    "properUsage": "",
    "storage": ""
}}"""
