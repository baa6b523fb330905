from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import select

from ..domain.dtos import ExtractedFinancialData
from ..domain.repositories import DEFAULT_LIMIT, ExtractionLogRepository
from ..models import ExtractionLogModel
from .base import SQLAlchemyRepository, apply_limit

_TWO_PLACES = Decimal("0.01")


class SQLExtractionLogRepository(SQLAlchemyRepository, ExtractionLogRepository):
    """Audit trail of every extraction run, stored as a JSON document."""

    entity_label = "extraction log"

    def save(self, transcription_text: str, data: ExtractedFinancialData) -> int:
        confidence = Decimal(str(data.confidence)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
        with self._session("save") as session:
            row = ExtractionLogModel(
                user_id=data.user_id,
                transcription_text=transcription_text,
                extracted_data=data.to_dict(),
                confidence=confidence,
                created_at=data.timestamp,
            )
            session.add(row)
            session.commit()
            return row.id

    def find_by_user_id(self, user_id: int, limit: int | None = DEFAULT_LIMIT) -> list[dict[str, object]]:
        stmt = (
            select(ExtractionLogModel)
            .where(ExtractionLogModel.user_id == user_id)
            .order_by(ExtractionLogModel.created_at.desc(), ExtractionLogModel.id.desc())
        )
        with self._session("list") as session:
            return [
                {
                    "id": row.id,
                    "user_id": row.user_id,
                    "transcription_text": row.transcription_text,
                    "extracted_data": row.extracted_data,
                    "confidence": float(row.confidence),
                    "created_at": row.created_at,
                }
                for row in session.scalars(apply_limit(stmt, limit))
            ]
