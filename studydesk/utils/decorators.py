from functools import wraps
from flask import flash, redirect, request, url_for
from ..services.session import get_auth_context

def session_required(view):
    """Redirect to the login view whenever there is no session; nothing is rendered before that."""
    @wraps(view)
    def wrapped(*args, **kwargs):
        if get_auth_context().current_session() is None:
            flash("Please sign in to continue", "warning")
            return redirect(url_for("auth.login", next=request.full_path if request.query_string else request.path))
        return view(*args, **kwargs)
    return wrapped
