from typing import Any


class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppError):
    """Raised when scheduling input is malformed (bad time, inverted interval, no days)."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=422, details=details)


class InvalidTimeFormat(ValidationError):
    def __init__(self, value: Any):
        super().__init__(
            f"Invalid time {value!r}: expected HH:MM in 24-hour format",
            details={"value": str(value)},
        )


class InvalidInterval(ValidationError):
    def __init__(self, start: str, end: str, day: int | None = None):
        super().__init__(
            f"End time {end} must be after start time {start}",
            details={"start_time": start, "end_time": end, "day_of_week": day},
        )


class ScheduleConflictError(AppError):
    """Raised when periods collide with teacher, classroom or break bookings.

    ``details["conflicts"]`` carries every detected conflict so the caller can
    fix them all in one round trip.
    """
    def __init__(self, conflicts: list[dict], message: str = "Schedule conflicts detected"):
        self.conflicts = conflicts
        super().__init__(message, status_code=409, details={"conflicts": conflicts})


class DuplicateTimetableError(AppError):
    """Raised when the term/class (or term/class group) scope already has a timetable."""
    def __init__(self, timetable_id: str | None = None):
        self.timetable_id = timetable_id
        super().__init__(
            "A timetable already exists for this class in the selected term",
            status_code=409,
            details={"timetable_id": timetable_id},
        )


class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class ReferenceNotFoundError(ResourceNotFoundError):
    """Raised when a timetable input points at an entity that does not exist."""
