"""create timetables, break times and periods

Revision ID: 20261017_0002
Revises: 20261017_0001
Create Date: 2026-10-17 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261017_0002"
down_revision = "20261017_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    break_type = sa.Enum("SHORT_BREAK", "LUNCH_BREAK", name="break_type")

    op.create_table(
        "timetables",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("term_id", sa.String(length=36), sa.ForeignKey("terms.id"), nullable=False),
        sa.Column("class_id", sa.String(length=36), sa.ForeignKey("classes.id"), nullable=True),
        sa.Column("class_group_id", sa.String(length=36), sa.ForeignKey("class_groups.id"), nullable=True),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("term_id", "class_id", name="uq_timetables_term_class"),
        sa.UniqueConstraint("term_id", "class_group_id", name="uq_timetables_term_class_group"),
        sa.CheckConstraint("class_id IS NOT NULL OR class_group_id IS NOT NULL", name="ck_timetables_scope"),
    )
    op.create_index("ix_timetables_term_id", "timetables", ["term_id"])

    op.create_table(
        "break_times",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column(
            "timetable_id",
            sa.String(length=36),
            sa.ForeignKey("timetables.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("day_of_week", sa.SmallInteger(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("type", break_type, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("day_of_week BETWEEN 1 AND 7", name="ck_break_times_day_of_week"),
    )
    op.create_index("ix_break_times_timetable_id", "break_times", ["timetable_id"])

    op.create_table(
        "periods",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column(
            "timetable_id",
            sa.String(length=36),
            sa.ForeignKey("timetables.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("day_of_week", sa.SmallInteger(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("duration_in_minutes", sa.Integer(), nullable=False, server_default="45"),
        sa.Column("subject_id", sa.String(length=36), sa.ForeignKey("subjects.id"), nullable=False),
        sa.Column("teacher_id", sa.String(length=36), sa.ForeignKey("teachers.id"), nullable=False),
        sa.Column("classroom_id", sa.String(length=36), sa.ForeignKey("classrooms.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("day_of_week BETWEEN 1 AND 7", name="ck_periods_day_of_week"),
    )
    op.create_index("ix_periods_timetable_id", "periods", ["timetable_id"])
    op.create_index("ix_periods_day_of_week", "periods", ["day_of_week"])
    op.create_index("ix_periods_teacher_id", "periods", ["teacher_id"])
    op.create_index("ix_periods_classroom_id", "periods", ["classroom_id"])


def downgrade() -> None:
    op.drop_index("ix_periods_classroom_id", table_name="periods")
    op.drop_index("ix_periods_teacher_id", table_name="periods")
    op.drop_index("ix_periods_day_of_week", table_name="periods")
    op.drop_index("ix_periods_timetable_id", table_name="periods")
    op.drop_table("periods")
    op.drop_index("ix_break_times_timetable_id", table_name="break_times")
    op.drop_table("break_times")
    op.drop_index("ix_timetables_term_id", table_name="timetables")
    op.drop_table("timetables")
    sa.Enum(name="break_type").drop(op.get_bind(), checkfirst=True)
