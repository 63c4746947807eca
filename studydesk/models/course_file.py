from ..extensions import db
from .base import OwnedMixin

class CourseFile(db.Model, OwnedMixin):
    __tablename__ = "course_files"

    id = db.Column(db.Integer, primary_key=True)
    # OwnedMixin: user_id
    course_id = db.Column(db.Integer, db.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    filename = db.Column(db.Text, nullable=False)
    # "{user_id}/{course_id}/{epoch_millis}.{ext}" inside the private bucket
    storage_path = db.Column(db.String(512), nullable=False, unique=True)
    size_bytes = db.Column(db.BigInteger)
    mime_type = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, server_default=db.func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<CourseFile id={self.id} path={self.storage_path!r}>"
