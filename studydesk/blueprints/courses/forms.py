from flask_wtf import FlaskForm
from flask_wtf.file import FileField, FileRequired
from wtforms import StringField, SubmitField, TextAreaField
from wtforms.validators import DataRequired, Length, Optional
from ...services.filters import COURSE_COLORS


def _strip(value):
    return value.strip() if isinstance(value, str) else value


class CourseForm(FlaskForm):
    title = StringField("Title", filters=[_strip], validators=[DataRequired(message="Title is required")])
    description = TextAreaField("Description", filters=[_strip], render_kw={"rows": 4})
    color = StringField("Color", default=COURSE_COLORS[0], validators=[Optional(), Length(max=32)])
    submit = SubmitField("Create course")


class CourseEditForm(FlaskForm):
    title = StringField("Title", filters=[_strip], validators=[DataRequired(message="Title is required")])
    description = TextAreaField("Description", render_kw={"rows": 2})
    submit = SubmitField("Save")


class NoteForm(FlaskForm):
    title = StringField("Title", filters=[_strip], validators=[DataRequired(message="Title is required")])
    content = TextAreaField("Content", render_kw={"rows": 6})
    submit = SubmitField("Save note")


class UploadForm(FlaskForm):
    file = FileField("File", validators=[FileRequired(message="No file selected")])
    submit = SubmitField("Upload")
