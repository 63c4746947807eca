from flask import current_app, flash, render_template
from flask_login import current_user
from sqlalchemy.exc import SQLAlchemyError
from . import bp
from ...services import records
from ...services.filters import dashboard_stats
from ...utils.decorators import session_required


@bp.get("/")
@session_required
def index():
    owner_id = current_user.id
    limit = current_app.config.get("DASHBOARD_RECENT_LIMIT", 6)
    courses = []
    stats = dashboard_stats([], 0)
    try:
        courses = records.list_courses(owner_id, limit=limit)
        notes_count = records.count_notes(owner_id)
        if current_app.config.get("DASHBOARD_STATS_SCOPE") == "all":
            stats = dashboard_stats(records.list_courses(owner_id), notes_count)
        else:
            # counts follow the recent page only
            stats = dashboard_stats(courses, notes_count)
    except SQLAlchemyError:
        current_app.logger.exception("dashboard fetch failed for user %s", owner_id)
        flash("Could not load your data", "danger")
    return render_template("dashboard.html", courses=courses, stats=stats)
