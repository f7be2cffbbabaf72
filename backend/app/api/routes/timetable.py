from fastapi import APIRouter, Depends, Query, status

from app.schemas.conflict import AvailabilityCheck
from app.schemas.timetable import (
    AvailabilityRequest,
    PeriodBatchRequest,
    PeriodInput,
    ScheduleOut,
    TimetableInput,
    TimetableOut,
)
from app.api.deps import get_timetable_service
from app.services.timetable_service import TimetableService

router = APIRouter()


@router.get("/", response_model=list[TimetableOut])
def list_timetables(
    term_id: str | None = Query(default=None, min_length=1, max_length=36),
    service: TimetableService = Depends(get_timetable_service),
) -> list[TimetableOut]:
    return service.list_timetables(term_id)


@router.post("/", response_model=TimetableOut, status_code=status.HTTP_201_CREATED)
def create_timetable(
    payload: TimetableInput,
    service: TimetableService = Depends(get_timetable_service),
) -> TimetableOut:
    return service.create_timetable(payload)


@router.post("/check-availability", response_model=AvailabilityCheck)
def check_availability(
    payload: AvailabilityRequest,
    service: TimetableService = Depends(get_timetable_service),
) -> AvailabilityCheck:
    return service.check_period_availability(payload)


@router.get("/teachers/{teacher_id}/schedule", response_model=ScheduleOut)
def get_teacher_schedule(
    teacher_id: str,
    term_id: str = Query(min_length=1, max_length=36),
    service: TimetableService = Depends(get_timetable_service),
) -> ScheduleOut:
    return service.teacher_schedule(teacher_id, term_id)


@router.get("/classrooms/{classroom_id}/schedule", response_model=ScheduleOut)
def get_classroom_schedule(
    classroom_id: str,
    term_id: str = Query(min_length=1, max_length=36),
    service: TimetableService = Depends(get_timetable_service),
) -> ScheduleOut:
    return service.classroom_schedule(classroom_id, term_id)


@router.get("/{timetable_id}", response_model=TimetableOut)
def get_timetable(
    timetable_id: str,
    service: TimetableService = Depends(get_timetable_service),
) -> TimetableOut:
    return service.get_timetable(timetable_id)


@router.put("/{timetable_id}/periods", response_model=TimetableOut)
def replace_periods(
    timetable_id: str,
    payload: PeriodBatchRequest,
    service: TimetableService = Depends(get_timetable_service),
) -> TimetableOut:
    return service.replace_periods(timetable_id, payload.periods)


@router.post("/{timetable_id}/periods", response_model=TimetableOut, status_code=status.HTTP_201_CREATED)
def add_periods(
    timetable_id: str,
    payload: PeriodBatchRequest,
    service: TimetableService = Depends(get_timetable_service),
) -> TimetableOut:
    return service.add_periods(timetable_id, payload.periods)


@router.put("/periods/{period_id}", response_model=TimetableOut)
def update_period(
    period_id: str,
    payload: PeriodInput,
    service: TimetableService = Depends(get_timetable_service),
) -> TimetableOut:
    return service.update_period(period_id, payload)


@router.delete("/{timetable_id}")
def delete_timetable(
    timetable_id: str,
    service: TimetableService = Depends(get_timetable_service),
) -> dict:
    service.delete_timetable(timetable_id)
    return {"success": True}
