"""
Prescription record service.
Sole writer of the prescriptions table: creation in PENDING, lookups,
and the verify/reject transition.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError

from rxanalysis.database import db
from rxanalysis.errors import (
    ExtractionProviderError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from rxanalysis.models.models import Prescription, PrescriptionStatus
from rxanalysis.services.contract import ExtractionResult

logger = logging.getLogger("rxanalysis.prescriptions")

MAX_PAGE_SIZE = 100


def _commit(action: str) -> None:
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Failed to %s: %s", action, exc)
        raise PersistenceError(f"Failed to {action}", cause=exc) from exc


def create_prescription(
    user_id: Optional[int],
    image_url: Optional[str],
    order_id: Optional[int] = None,
    ai_analysis: Optional[Any] = None,
) -> Prescription:
    """Persist a new prescription in PENDING status."""
    if not user_id:
        raise ValidationError("User ID is required")
    if not isinstance(image_url, str) or not image_url.strip():
        raise ValidationError("Image URL is required")

    analysis = None
    if ai_analysis is not None:
        if isinstance(ai_analysis, ExtractionResult):
            analysis = ai_analysis.to_dict()
        elif isinstance(ai_analysis, dict):
            try:
                analysis = ExtractionResult.from_dict(ai_analysis).to_dict()
            except ExtractionProviderError as exc:
                raise ValidationError(f"aiAnalysis is malformed: {exc.cause}") from exc
        else:
            raise ValidationError("aiAnalysis must be an object")

    prescription = Prescription(
        user_id=user_id,
        image_url=image_url,
        order_id=order_id,
        ai_analysis=analysis,
        status=PrescriptionStatus.PENDING.value,
    )
    db.session.add(prescription)
    _commit("create prescription")
    logger.info("Created prescription #%s for user #%s", prescription.id, user_id)
    return prescription


def get_prescription(prescription_id: int) -> Prescription:
    try:
        prescription = db.session.get(Prescription, prescription_id)
    except SQLAlchemyError as exc:
        logger.error("Failed to retrieve prescription #%s: %s", prescription_id, exc)
        raise PersistenceError("Failed to retrieve prescription", cause=exc) from exc
    if prescription is None:
        raise NotFoundError(f"Prescription with ID {prescription_id} not found")
    return prescription


def list_user_prescriptions(user_id: int) -> list[Prescription]:
    """All prescriptions of one user, most recent first."""
    try:
        return (
            Prescription.query
            .filter_by(user_id=user_id)
            .order_by(Prescription.created_at.desc(), Prescription.id.desc())
            .all()
        )
    except SQLAlchemyError as exc:
        logger.error("Failed to retrieve prescriptions of user #%s: %s", user_id, exc)
        raise PersistenceError("Failed to retrieve user prescriptions", cause=exc) from exc


def list_prescriptions(
    status: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[Prescription], int]:
    """
    Paginated listing for the review queue, optionally filtered by status.
    Returns (items, total).
    """
    if page < 1:
        raise ValidationError("page must be >= 1")
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}")

    query = Prescription.query
    if status:
        valid = {s.value for s in PrescriptionStatus}
        if status.upper() not in valid:
            raise ValidationError(
                f"Invalid status value: {status}. Expected one of: {', '.join(sorted(valid))}."
            )
        query = query.filter_by(status=status.upper())

    try:
        total = query.count()
        items = (
            query.order_by(Prescription.created_at.desc(), Prescription.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
    except SQLAlchemyError as exc:
        logger.error("Failed to list prescriptions: %s", exc)
        raise PersistenceError("Failed to list prescriptions", cause=exc) from exc
    return items, total


def update_prescription_status(
    prescription_id: int,
    is_verified: bool,
    verified_by: Optional[int] = None,
    notes: Optional[str] = None,
) -> Prescription:
    """
    Mark a prescription VERIFIED (is_verified=True) or REJECTED.
    Calling again on an already reviewed record overwrites the review.
    """
    prescription = get_prescription(prescription_id)
    previous = prescription.status
    status = PrescriptionStatus.VERIFIED if is_verified else PrescriptionStatus.REJECTED

    if previous != PrescriptionStatus.PENDING.value:
        logger.warning(
            "Prescription #%s re-reviewed: %s -> %s", prescription_id, previous, status.value
        )

    prescription.status = status.value
    prescription.verified_by = verified_by
    prescription.verification_notes = notes
    prescription.verified_at = datetime.utcnow()
    _commit("update prescription verification status")

    logger.info(
        "Prescription #%s marked %s by user #%s", prescription_id, status.value, verified_by
    )
    return prescription
