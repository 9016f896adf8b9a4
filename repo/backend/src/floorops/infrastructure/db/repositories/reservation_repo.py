from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Iterable

from sqlalchemy import Select, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from floorops.application.ports.repositories import (
    DuplicateKeyError,
    ReservationFilters,
    ReservationRepository,
    StaleStatusError,
)
from floorops.domain.common.ids import ReservationId, TableId
from floorops.domain.reservation.entities import (
    SLOT_HOLDING_STATUSES,
    Reservation,
    ReservationStatus,
)
from floorops.infrastructure.db.models.reservation import ReservationModel

_HOLDING_VALUES = sorted(status.value for status in SLOT_HOLDING_STATUSES)


class SqlAlchemyReservationRepository(ReservationRepository):
    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, reservation: Reservation) -> None:
        self._session.add(
            ReservationModel(
                id=str(reservation.reservation_id),
                table_id=str(reservation.table_id),
                customer_name=reservation.customer_name,
                phone=reservation.phone,
                email=reservation.email,
                party_size=reservation.party_size,
                reservation_date=reservation.reservation_date,
                reservation_time=reservation.reservation_time,
                status=reservation.status.value,
                notes=reservation.notes,
                created_at=reservation.created_at,
            )
        )
        self._flush(reservation)

    def get(
        self,
        reservation_id: ReservationId,
        for_update: bool = False,
    ) -> Reservation | None:
        statement = (
            select(ReservationModel)
            .where(ReservationModel.id == str(reservation_id))
            .execution_options(populate_existing=True)
        )
        if for_update:
            statement = statement.with_for_update()
        model = self._session.execute(statement).scalar_one_or_none()
        if model is None:
            return None
        return self._to_domain(model)

    def save(self, reservation: Reservation) -> None:
        model = self._session.get(ReservationModel, str(reservation.reservation_id))
        if model is None:
            raise RuntimeError(f"reservation {reservation.reservation_id} not found for update")
        model.table_id = str(reservation.table_id)
        model.customer_name = reservation.customer_name
        model.phone = reservation.phone
        model.email = reservation.email
        model.party_size = reservation.party_size
        model.reservation_date = reservation.reservation_date
        model.reservation_time = reservation.reservation_time
        model.notes = reservation.notes
        model.updated_at = datetime.now(timezone.utc)
        self._flush(reservation)

    def update_status(
        self,
        reservation: Reservation,
        expected_status: ReservationStatus,
    ) -> Reservation:
        statement = (
            update(ReservationModel)
            .where(
                ReservationModel.id == str(reservation.reservation_id),
                ReservationModel.status == expected_status.value,
            )
            .values(
                status=reservation.status.value,
                notes=reservation.notes,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        result = self._session.execute(statement)
        if result.rowcount != 1:
            current = self._session.execute(
                select(ReservationModel.status).where(
                    ReservationModel.id == str(reservation.reservation_id)
                )
            ).scalar_one_or_none()
            raise StaleStatusError(
                f"reservation {reservation.reservation_id} status is {current}, "
                f"expected {expected_status.value}",
                current_status=current,
            )
        return reservation

    def find_conflict(
        self,
        table_id: TableId,
        reservation_date: date,
        reservation_time: time,
        exclude_id: ReservationId | None = None,
    ) -> Reservation | None:
        statement = select(ReservationModel).where(
            ReservationModel.table_id == str(table_id),
            ReservationModel.reservation_date == reservation_date,
            ReservationModel.reservation_time == reservation_time,
            ReservationModel.status.in_(_HOLDING_VALUES),
        )
        if exclude_id is not None:
            statement = statement.where(ReservationModel.id != str(exclude_id))
        model = self._session.execute(statement.limit(1)).scalar_one_or_none()
        if model is None:
            return None
        return self._to_domain(model)

    def booked_table_ids(self, reservation_date: date, reservation_time: time) -> set[TableId]:
        statement = select(ReservationModel.table_id).where(
            ReservationModel.reservation_date == reservation_date,
            ReservationModel.reservation_time == reservation_time,
            ReservationModel.status.in_(_HOLDING_VALUES),
        )
        return {TableId(value) for value in self._session.execute(statement).scalars()}

    def list(
        self,
        filters: ReservationFilters,
        offset: int,
        limit: int,
    ) -> tuple[list[Reservation], int]:
        count_statement = self._filtered(select(func.count(ReservationModel.id)), filters)
        total = int(self._session.execute(count_statement).scalar_one())

        statement = (
            self._filtered(select(ReservationModel), filters)
            .order_by(
                ReservationModel.reservation_date,
                ReservationModel.reservation_time,
                ReservationModel.id,
            )
            .offset(offset)
            .limit(limit)
        )
        models = self._session.execute(statement).scalars().all()
        return [self._to_domain(model) for model in models], total

    def list_for_date(self, reservation_date: date) -> list[Reservation]:
        statement = (
            select(ReservationModel)
            .where(ReservationModel.reservation_date == reservation_date)
            .order_by(ReservationModel.reservation_time, ReservationModel.id)
        )
        return [self._to_domain(model) for model in self._session.execute(statement).scalars()]

    def count_for_table(
        self,
        table_id: TableId,
        statuses: Iterable[ReservationStatus] | None = None,
        from_date: date | None = None,
    ) -> int:
        statement = select(func.count(ReservationModel.id)).where(
            ReservationModel.table_id == str(table_id)
        )
        if statuses is not None:
            values = [status.value for status in statuses]
            statement = statement.where(ReservationModel.status.in_(values))
        if from_date is not None:
            statement = statement.where(ReservationModel.reservation_date >= from_date)
        return int(self._session.execute(statement).scalar_one())

    def _filtered(self, statement: Select, filters: ReservationFilters) -> Select:
        if filters.date_from is not None:
            statement = statement.where(ReservationModel.reservation_date >= filters.date_from)
        if filters.date_to is not None:
            statement = statement.where(ReservationModel.reservation_date <= filters.date_to)
        if filters.status is not None:
            statement = statement.where(ReservationModel.status == filters.status.value)
        if filters.table_id is not None:
            statement = statement.where(ReservationModel.table_id == str(filters.table_id))
        if filters.customer:
            statement = statement.where(
                ReservationModel.customer_name.ilike(f"%{filters.customer}%")
            )
        return statement

    def _flush(self, reservation: Reservation) -> None:
        try:
            self._session.flush()
        except IntegrityError as exc:
            raise DuplicateKeyError(
                f"table {reservation.table_id} already holds a reservation for that slot"
            ) from exc

    def _to_domain(self, model: ReservationModel) -> Reservation:
        created_at = model.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return Reservation(
            reservation_id=ReservationId(model.id),
            table_id=TableId(model.table_id),
            customer_name=model.customer_name,
            phone=model.phone,
            email=model.email,
            party_size=model.party_size,
            reservation_date=model.reservation_date,
            reservation_time=model.reservation_time,
            status=ReservationStatus(model.status),
            notes=model.notes,
            created_at=created_at,
        )
