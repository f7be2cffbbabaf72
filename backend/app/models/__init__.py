from app.models.classroom import Classroom  # noqa: F401
from app.models.school_class import ClassGroup, SchoolClass  # noqa: F401
from app.models.subject import Subject  # noqa: F401
from app.models.teacher import Teacher  # noqa: F401
from app.models.term import Term  # noqa: F401
from app.models.timetable import BreakTime, BreakType, Period, Timetable  # noqa: F401
