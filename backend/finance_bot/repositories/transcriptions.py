from __future__ import annotations

from sqlalchemy import Select, delete, select

from ..domain.entities import Transcription
from ..domain.errors import NotFoundError, entity_not_found
from ..domain.repositories import DEFAULT_LIMIT, TranscriptionRepository
from ..mappers import apply_transcription, transcription_to_domain
from ..models import TranscriptionLogModel
from .base import SQLAlchemyRepository, apply_limit


class SQLTranscriptionRepository(SQLAlchemyRepository, TranscriptionRepository):
    entity_label = "transcription"

    def save(self, transcription: Transcription) -> Transcription:
        with self._session("save") as session:
            row = TranscriptionLogModel(created_at=transcription.created_at)
            apply_transcription(row, transcription)
            session.add(row)
            session.commit()
            session.refresh(row)
            return transcription_to_domain(row)

    def find_by_id(self, transcription_id: int) -> Transcription | None:
        with self._session("find") as session:
            row = session.get(TranscriptionLogModel, transcription_id)
            return transcription_to_domain(row) if row else None

    def _list(self, stmt: Select, limit: int | None) -> list[Transcription]:
        stmt = stmt.order_by(TranscriptionLogModel.created_at.desc(), TranscriptionLogModel.id.desc())
        with self._session("list") as session:
            return [transcription_to_domain(row) for row in session.scalars(apply_limit(stmt, limit))]

    def find_by_user_id(self, user_id: int, limit: int | None = DEFAULT_LIMIT) -> list[Transcription]:
        stmt = select(TranscriptionLogModel).where(TranscriptionLogModel.user_id == user_id)
        return self._list(stmt, limit)

    def find_recent(self, limit: int | None = DEFAULT_LIMIT) -> list[Transcription]:
        return self._list(select(TranscriptionLogModel), limit)

    def update(self, transcription: Transcription) -> Transcription:
        with self._session("update") as session:
            row = session.get(TranscriptionLogModel, transcription.id) if transcription.id else None
            if row is None:
                raise NotFoundError(entity_not_found("Transcription", transcription.id))
            apply_transcription(row, transcription)
            session.commit()
            session.refresh(row)
            return transcription_to_domain(row)

    def delete(self, transcription_id: int) -> bool:
        with self._session("delete") as session:
            result = session.execute(
                delete(TranscriptionLogModel).where(TranscriptionLogModel.id == transcription_id)
            )
            session.commit()
            return result.rowcount > 0
