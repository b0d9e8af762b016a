"""
Audit logger – after-request hook that writes every prescription API
interaction to the audit_log table for later review.
Image payloads and patient details are redacted; bodies are truncated.
"""

import json
import logging
from flask import request
from rxanalysis.database import db
from rxanalysis.models.models import AuditLog

logger = logging.getLogger("rxanalysis.audit")

AUDITED_PREFIX = "/api/prescriptions"
REDACTED_FIELDS = ("imageBase64", "aiAnalysis", "password", "token")
PATIENT_FIELDS = ("patientInfo", "aiAnalysis")
MAX_LOGGED_CHARS = 2000


def _has_patient_data(value) -> bool:
    if isinstance(value, dict):
        return any(k in PATIENT_FIELDS for k in value) or any(
            _has_patient_data(v) for v in value.values()
        )
    if isinstance(value, list):
        return any(_has_patient_data(v) for v in value)
    return False


def _summarize_response(data) -> dict:
    """Responses carrying patient details are reduced to their status fields."""
    if isinstance(data, dict) and _has_patient_data(data.get("data")):
        return {
            "success": data.get("success"),
            "message": data.get("message"),
            "data": "<redacted>",
        }
    return data


def audit_after_request(response):
    """Log every pipeline request/response pair."""
    if not request.path.startswith(AUDITED_PREFIX):
        return response

    try:
        req_body = None
        if request.is_json:
            try:
                body = request.get_json(silent=True) or {}
                if isinstance(body, dict):
                    body = {
                        k: ("<redacted>" if k in REDACTED_FIELDS else v)
                        for k, v in body.items()
                    }
                req_body = json.dumps(body)[:MAX_LOGGED_CHARS]
            except (TypeError, ValueError):
                req_body = "<unreadable>"

        resp_summary = None
        if response.is_json:
            try:
                resp_data = response.get_json(silent=True) or {}
                resp_summary = json.dumps(_summarize_response(resp_data))[:MAX_LOGGED_CHARS]
            except (TypeError, ValueError):
                resp_summary = "<unreadable>"

        entry = AuditLog(
            endpoint=request.path,
            method=request.method,
            status_code=response.status_code,
            request_body=req_body,
            response_summary=resp_summary,
        )
        db.session.add(entry)
        db.session.commit()
    except Exception as exc:
        logger.warning("Audit logging failed: %s", exc)
        db.session.rollback()

    return response
