import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Integer,
    SmallInteger,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.db.base import Base
from app.db.types import TimeOfDayType
from app.models.classroom import Classroom
from app.models.school_class import ClassGroup, SchoolClass
from app.models.subject import Subject
from app.models.teacher import Teacher
from app.services.time_values import DayOfWeek, Interval, TimeOfDay


class BreakType(str, Enum):
    SHORT_BREAK = "SHORT_BREAK"
    LUNCH_BREAK = "LUNCH_BREAK"


class BreakTime(Base):
    __tablename__ = "break_times"
    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 1 AND 7", name="ck_break_times_day_of_week"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    timetable_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("timetables.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day_of_week: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    start_time: Mapped[TimeOfDay] = mapped_column(TimeOfDayType, nullable=False)
    end_time: Mapped[TimeOfDay] = mapped_column(TimeOfDayType, nullable=False)
    type: Mapped[BreakType] = mapped_column(SAEnum(BreakType, name="break_type"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    timetable: Mapped["Timetable"] = relationship(back_populates="break_times")

    @property
    def interval(self) -> Interval:
        return Interval(DayOfWeek(self.day_of_week), self.start_time, self.end_time)


class Period(Base):
    __tablename__ = "periods"
    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 1 AND 7", name="ck_periods_day_of_week"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    timetable_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("timetables.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day_of_week: Mapped[int] = mapped_column(SmallInteger, nullable=False, index=True)
    start_time: Mapped[TimeOfDay] = mapped_column(TimeOfDayType, nullable=False)
    end_time: Mapped[TimeOfDay] = mapped_column(TimeOfDayType, nullable=False)
    duration_in_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=45)
    subject_id: Mapped[str] = mapped_column(String(36), ForeignKey("subjects.id"), nullable=False)
    teacher_id: Mapped[str] = mapped_column(String(36), ForeignKey("teachers.id"), nullable=False, index=True)
    classroom_id: Mapped[str] = mapped_column(String(36), ForeignKey("classrooms.id"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    timetable: Mapped["Timetable"] = relationship(back_populates="periods")
    subject: Mapped[Subject] = relationship(lazy="joined")
    teacher: Mapped[Teacher] = relationship(lazy="joined")
    classroom: Mapped[Classroom] = relationship(lazy="joined")

    @property
    def interval(self) -> Interval:
        return Interval(DayOfWeek(self.day_of_week), self.start_time, self.end_time)


class Timetable(Base):
    __tablename__ = "timetables"
    __table_args__ = (
        UniqueConstraint("term_id", "class_id", name="uq_timetables_term_class"),
        UniqueConstraint("term_id", "class_group_id", name="uq_timetables_term_class_group"),
        CheckConstraint(
            "class_id IS NOT NULL OR class_group_id IS NOT NULL",
            name="ck_timetables_scope",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    term_id: Mapped[str] = mapped_column(String(36), ForeignKey("terms.id"), nullable=False, index=True)
    class_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("classes.id"), nullable=True)
    class_group_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("class_groups.id"), nullable=True)
    start_time: Mapped[TimeOfDay] = mapped_column(TimeOfDayType, nullable=False)
    end_time: Mapped[TimeOfDay] = mapped_column(TimeOfDayType, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    school_class: Mapped[SchoolClass | None] = relationship()
    class_group: Mapped[ClassGroup | None] = relationship()
    break_times: Mapped[list[BreakTime]] = relationship(
        back_populates="timetable",
        cascade="all, delete-orphan",
        order_by=[BreakTime.day_of_week, BreakTime.start_time],
    )
    periods: Mapped[list[Period]] = relationship(
        back_populates="timetable",
        cascade="all, delete-orphan",
        order_by=[Period.day_of_week, Period.start_time],
    )

    @property
    def scope_label(self) -> str:
        if self.school_class is not None:
            return self.school_class.name
        if self.class_group is not None:
            return self.class_group.name
        return self.class_id or self.class_group_id or self.id
