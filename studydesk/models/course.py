from ..extensions import db
from .base import OwnedMixin, TimestampMixin

COURSE_STATUSES = ("active", "completed", "archived")
DEFAULT_COURSE_COLOR = "#6c5ce7"

class Course(db.Model, OwnedMixin, TimestampMixin):
    __tablename__ = "courses"

    id = db.Column(db.Integer, primary_key=True)
    # OwnedMixin: user_id
    title = db.Column(db.Text, nullable=False)
    description = db.Column(db.Text)
    color = db.Column(db.String(32), default=DEFAULT_COURSE_COLOR)
    status = db.Column(db.String(20), default="active", nullable=False)

    notes = db.relationship("Note", backref="course", cascade="all, delete-orphan")
    files = db.relationship("CourseFile", backref="course", cascade="all, delete-orphan")

    __table_args__ = (
        db.CheckConstraint("status IN ('active', 'completed', 'archived')", name="ck_courses_status"),
    )

    def __repr__(self) -> str:
        return f"<Course id={self.id} title={self.title!r} status={self.status}>"
