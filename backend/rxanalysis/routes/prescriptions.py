"""
Prescription routes.
Thin boundary: validates request bodies, calls the pipeline services and
wraps results as {success, data, message}. Failures are raised as
PipelineError subclasses and rendered by the app-level error handler.
"""

from flask import Blueprint, current_app, jsonify, request

from rxanalysis.errors import ValidationError
from rxanalysis.services.analysis_service import analyze_prescription
from rxanalysis.services.interaction_checker import check_interactions
from rxanalysis.services.medication_info_service import resolve_medication_info
from rxanalysis.services.ocr_text_parser import parse_prescription_text
from rxanalysis.services.prescription_service import (
    create_prescription,
    get_prescription,
    list_prescriptions,
    list_user_prescriptions,
    update_prescription_status,
)
from rxanalysis.services.providers.selection import get_provider

prescriptions_bp = Blueprint("prescriptions", __name__)

MAX_OCR_TEXT_LENGTH = 15000

# Largest value a 64-bit signed INTEGER column can hold
MAX_DB_INT = 2**63 - 1


def _body() -> dict:
    data = request.get_json(force=True, silent=True)
    return data if isinstance(data, dict) else {}


def _parse_id(raw, label: str) -> int:
    if isinstance(raw, bool):
        raise ValidationError(f"Valid {label} is required")
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"Valid {label} is required")
    if value < 1 or value > MAX_DB_INT:
        raise ValidationError(f"Valid {label} is required")
    return value


def _optional_int(data: dict, key: str):
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be an integer")
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be an integer")
    if value < 1 or value > MAX_DB_INT:
        raise ValidationError(f"{key} is out of range")
    return value


def _ok(data, message: str, status: int = 200, **extra):
    payload = {"success": True, "data": data, "message": message}
    payload.update(extra)
    return jsonify(payload), status


# ── AI pipeline ─────────────────────────────────────────────────────────────

@prescriptions_bp.route("/analyze", methods=["POST"])
def analyze():
    """
    Analyze a prescription image.

    Body: { "imageBase64": "<base64, optionally with a data:image/...;base64, prefix>" }
    """
    image = _body().get("imageBase64")
    if not image:
        raise ValidationError("Image data is required for prescription analysis")

    result = analyze_prescription(
        get_provider(), image, max_length=current_app.config.get("MAX_IMAGE_BYTES")
    )
    return _ok(result.to_dict(), "Prescription analyzed successfully")


@prescriptions_bp.route("/check-interactions", methods=["POST"])
def interactions():
    """
    Check interactions between medications.

    Body: { "medications": ["Metformin", "Ibuprofen"] }
    """
    medications = _body().get("medications")
    if not isinstance(medications, list) or not medications:
        raise ValidationError("Medications list is required for interaction check")

    report = check_interactions(get_provider(), medications)
    return _ok(report.to_dict(), "Drug interactions analyzed successfully")


@prescriptions_bp.route("/medication-info", methods=["POST"])
def medication_info():
    """Body: { "medicationName": "Metformin" }"""
    name = _body().get("medicationName")
    if not name or not isinstance(name, str):
        raise ValidationError("Medication name is required")

    info = resolve_medication_info(get_provider(), name)
    return _ok(info.to_dict(), "Medication information retrieved successfully")


@prescriptions_bp.route("/parse-text", methods=["POST"])
def parse_text():
    """
    Parse already-OCR'd prescription text without an AI call.

    Body: { "text": "Full text extracted from prescription via OCR" }
    """
    text = _body().get("text")
    if not isinstance(text, str) or not text.strip():
        raise ValidationError("No prescription text provided.")
    if len(text) > MAX_OCR_TEXT_LENGTH:
        raise ValidationError("Prescription text too long (max 15,000 characters).")

    result = parse_prescription_text(text)
    return _ok(result.to_dict(), "Prescription text parsed successfully")


# ── Records ─────────────────────────────────────────────────────────────────

@prescriptions_bp.route("", methods=["POST"])
@prescriptions_bp.route("/", methods=["POST"])
def create():
    """Body: { "userId", "imageUrl", "orderId"?, "aiAnalysis"? }"""
    data = _body()
    if not data.get("userId"):
        raise ValidationError("User ID is required")
    image_url = data.get("imageUrl")
    if not isinstance(image_url, str) or not image_url.strip():
        raise ValidationError("Image URL is required")

    prescription = create_prescription(
        user_id=_parse_id(data["userId"], "user ID"),
        image_url=image_url,
        order_id=_optional_int(data, "orderId"),
        ai_analysis=data.get("aiAnalysis"),
    )
    return _ok(prescription.to_dict(), "Prescription created successfully", 201)


@prescriptions_bp.route("", methods=["GET"])
@prescriptions_bp.route("/", methods=["GET"])
def list_all():
    """Review queue. Query: ?status=PENDING&page=1&limit=10"""
    page = request.args.get("page", 1, type=int)
    limit = request.args.get("limit", 10, type=int)
    status = request.args.get("status")

    items, total = list_prescriptions(status=status, page=page, limit=limit)
    return _ok(
        [p.to_dict() for p in items],
        f"Retrieved {len(items)} of {total} prescriptions",
        total=total, page=page, limit=limit,
    )


@prescriptions_bp.route("/user/<user_id>", methods=["GET"])
def list_for_user(user_id):
    uid = _parse_id(user_id, "user ID")
    prescriptions = list_user_prescriptions(uid)
    return _ok(
        [p.to_dict() for p in prescriptions],
        f"Retrieved {len(prescriptions)} prescriptions for user {uid}",
        count=len(prescriptions),
    )


@prescriptions_bp.route("/detail/<prescription_id>", methods=["GET"])
def detail(prescription_id):
    prescription = get_prescription(_parse_id(prescription_id, "prescription ID"))
    return _ok(prescription.to_dict(), "Prescription retrieved successfully")


@prescriptions_bp.route("/<prescription_id>/status", methods=["PUT"])
def update_status(prescription_id):
    """Body: { "isVerified": true, "verifiedBy"?: 7, "verificationNotes"?: "ok" }"""
    pid = _parse_id(prescription_id, "prescription ID")
    data = _body()
    if "isVerified" not in data or data["isVerified"] is None:
        raise ValidationError("Verification status (isVerified) is required")
    if not isinstance(data["isVerified"], bool):
        raise ValidationError("isVerified must be a boolean")

    notes = data.get("verificationNotes")
    if notes is not None and not isinstance(notes, str):
        raise ValidationError("verificationNotes must be a string")

    prescription = update_prescription_status(
        pid,
        data["isVerified"],
        verified_by=_optional_int(data, "verifiedBy"),
        notes=notes,
    )
    return _ok(prescription.to_dict(), f"Prescription status updated to {prescription.status}")
