from ..extensions import db
from .base import OwnedMixin, TimestampMixin

class Note(db.Model, OwnedMixin, TimestampMixin):
    __tablename__ = "course_notes"

    id = db.Column(db.Integer, primary_key=True)
    # OwnedMixin: user_id
    course_id = db.Column(db.Integer, db.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    title = db.Column(db.Text, nullable=False)
    content = db.Column(db.Text)

    def __repr__(self) -> str:
        return f"<Note id={self.id} course_id={self.course_id}>"
