from schoolgrid.models.grade import Grade, Section  # noqa: F401
from schoolgrid.models.period import Period  # noqa: F401
from schoolgrid.models.room import Room, RoomType  # noqa: F401
from schoolgrid.models.schedule_entry import ScheduleEntry  # noqa: F401
from schoolgrid.models.teacher import Teacher  # noqa: F401
