"""
SQLAlchemy ORM models – prescriptions and the API audit trail.
"""

import enum
from datetime import datetime
from rxanalysis.database import db


class PrescriptionStatus(str, enum.Enum):
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


class Prescription(db.Model):
    """One analysed prescription tracked through review."""
    __tablename__ = "prescriptions"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    user_id = db.Column(db.Integer, nullable=False, index=True)
    image_url = db.Column(db.Text, nullable=False)
    order_id = db.Column(db.Integer)
    ai_analysis = db.Column(db.JSON)                        # ExtractionResult wire shape
    status = db.Column(db.String(20), nullable=False, default=PrescriptionStatus.PENDING.value)
    verified_by = db.Column(db.Integer)
    verification_notes = db.Column(db.Text)
    verified_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "imageUrl": self.image_url,
            "orderId": self.order_id,
            "aiAnalysis": self.ai_analysis,
            "status": self.status,
            "verifiedBy": self.verified_by,
            "verificationNotes": self.verification_notes,
            "verifiedAt": self.verified_at.isoformat() if self.verified_at else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


class AuditLog(db.Model):
    __tablename__ = "audit_log"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    endpoint = db.Column(db.String(255), nullable=False)
    method = db.Column(db.String(10), nullable=False)
    status_code = db.Column(db.Integer)
    request_body = db.Column(db.Text)
    response_summary = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "endpoint": self.endpoint,
            "method": self.method,
            "status_code": self.status_code,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
