from .user import User
from .course import Course, COURSE_STATUSES, DEFAULT_COURSE_COLOR
from .note import Note
from .course_file import CourseFile
