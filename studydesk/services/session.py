"""Authentication context shared by every protected view.

The context is an explicit object registered on the app instead of ambient
global state: it is started with the app (subscribing to Flask-Login's
sign-in / sign-out signals), stopped on teardown, and lets any number of
listeners follow auth-state changes.
"""
from dataclasses import dataclass
from typing import Callable, List, Optional

from flask_login import current_user, user_logged_in, user_logged_out

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"


@dataclass(frozen=True)
class AuthSession:
    user_id: int
    email: str


Listener = Callable[[str, Optional[AuthSession]], None]


def _session_for(user) -> Optional[AuthSession]:
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    return AuthSession(user_id=user.id, email=user.email)


class AuthContext:
    def __init__(self, app=None):
        self.app = None
        self._listeners: List[Listener] = []
        self._started = False
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.app = app
        app.extensions["auth_context"] = self
        self.start()

    def start(self):
        if self._started or self.app is None:
            return
        user_logged_in.connect(self._on_logged_in, sender=self.app)
        user_logged_out.connect(self._on_logged_out, sender=self.app)
        self._started = True

    def stop(self):
        if not self._started:
            return
        user_logged_in.disconnect(self._on_logged_in, sender=self.app)
        user_logged_out.disconnect(self._on_logged_out, sender=self.app)
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener(event, session)``; returns the unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def current_session(self) -> Optional[AuthSession]:
        return _session_for(current_user)

    def _emit(self, event: str, session: Optional[AuthSession]):
        for listener in list(self._listeners):
            listener(event, session)

    def _on_logged_in(self, sender, user=None, **extra):
        self._emit(SIGNED_IN, _session_for(user))

    def _on_logged_out(self, sender, user=None, **extra):
        self._emit(SIGNED_OUT, None)


def get_auth_context() -> AuthContext:
    from flask import current_app
    return current_app.extensions["auth_context"]
