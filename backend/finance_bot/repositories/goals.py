from __future__ import annotations

from datetime import date, timedelta

from sqlalchemy import Select, delete, select

from ..domain.entities import FinancialGoal, GoalStatus, utcnow
from ..domain.errors import NotFoundError, entity_not_found
from ..domain.repositories import DEFAULT_LIMIT, GoalRepository
from ..mappers import apply_goal, goal_to_domain
from ..models import GoalModel
from .base import SQLAlchemyRepository, apply_limit


def _active(user_id: int) -> Select:
    return select(GoalModel).where(GoalModel.user_id == user_id, GoalModel.status == "active")


class SQLGoalRepository(SQLAlchemyRepository, GoalRepository):
    entity_label = "financial goal"

    def save(self, goal: FinancialGoal) -> FinancialGoal:
        with self._session("save") as session:
            row = GoalModel(created_at=goal.created_at)
            apply_goal(row, goal)
            session.add(row)
            session.commit()
            session.refresh(row)
            return goal_to_domain(row)

    def find_by_id(self, goal_id: int) -> FinancialGoal | None:
        with self._session("find") as session:
            row = session.get(GoalModel, goal_id)
            return goal_to_domain(row) if row else None

    def _list(self, stmt: Select, limit: int | None = None) -> list[FinancialGoal]:
        stmt = stmt.order_by(
            GoalModel.target_date.desc().nulls_last(),
            GoalModel.created_at.desc(),
            GoalModel.id.desc(),
        )
        with self._session("list") as session:
            return [goal_to_domain(row) for row in session.scalars(apply_limit(stmt, limit))]

    def find_by_user_id(self, user_id: int, limit: int | None = DEFAULT_LIMIT) -> list[FinancialGoal]:
        return self._list(select(GoalModel).where(GoalModel.user_id == user_id), limit)

    def find_active_by_user_id(self, user_id: int, limit: int | None = DEFAULT_LIMIT) -> list[FinancialGoal]:
        return self._list(_active(user_id), limit)

    def find_by_user_id_and_status(
        self, user_id: int, status: GoalStatus, limit: int | None = DEFAULT_LIMIT
    ) -> list[FinancialGoal]:
        stmt = select(GoalModel).where(GoalModel.user_id == user_id, GoalModel.status == status)
        return self._list(stmt, limit)

    def find_by_user_id_and_category(
        self, user_id: int, category: str, limit: int | None = DEFAULT_LIMIT
    ) -> list[FinancialGoal]:
        stmt = select(GoalModel).where(GoalModel.user_id == user_id, GoalModel.category == category)
        return self._list(stmt, limit)

    def find_overdue_by_user_id(self, user_id: int, today: date | None = None) -> list[FinancialGoal]:
        today = today or date.today()
        return self._list(_active(user_id).where(GoalModel.target_date < today))

    def find_nearing_target_date(
        self, user_id: int, days_threshold: int, today: date | None = None
    ) -> list[FinancialGoal]:
        today = today or date.today()
        stmt = _active(user_id).where(
            GoalModel.target_date >= today,
            GoalModel.target_date <= today + timedelta(days=days_threshold),
        )
        return self._list(stmt)

    def update(self, goal: FinancialGoal) -> FinancialGoal:
        with self._session("update") as session:
            row = session.get(GoalModel, goal.id) if goal.id else None
            if row is None:
                raise NotFoundError(entity_not_found("Financial goal", goal.id))
            apply_goal(row, goal)
            row.updated_at = goal.updated_at or utcnow()
            session.commit()
            session.refresh(row)
            return goal_to_domain(row)

    def delete(self, goal_id: int) -> bool:
        with self._session("delete") as session:
            result = session.execute(delete(GoalModel).where(GoalModel.id == goal_id))
            session.commit()
            return result.rowcount > 0

    def get_average_completion(self, user_id: int) -> float:
        goals = self._list(_active(user_id))
        if not goals:
            return 0.0
        total = sum(float(goal.progress_percentage()) for goal in goals)
        return round(total / len(goals), 2)
