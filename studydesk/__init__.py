import os
from flask import Flask
from .extensions import db, migrate, login_manager, csrf
from .services.session import AuthContext


def create_app(config=None):
    """App factory.

    ``config`` is an optional mapping applied on top of ``config.Config``;
    tests use it to point the database and storage at temporary locations.
    """
    app = Flask(__name__)
    app.config.from_object('config.Config')
    if config:
        app.config.update(config)
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    login_manager.login_view = 'auth.login'
    login_manager.login_message_category = 'warning'
    csrf.init_app(app)

    auth_context = AuthContext(app)
    auth_context.subscribe(
        lambda event, session: app.logger.info(
            'auth state %s for user %s', event, session.user_id if session else '-'
        )
    )

    @login_manager.user_loader
    def load_user(user_id):
        from .models.user import User
        return db.session.get(User, int(user_id))

    from .blueprints.auth import bp as auth_bp
    app.register_blueprint(auth_bp, url_prefix="/auth")

    from .blueprints.dashboard import bp as dashboard_bp
    app.register_blueprint(dashboard_bp)

    from .blueprints.courses import bp as courses_bp
    app.register_blueprint(courses_bp, url_prefix="/courses")

    from .blueprints.notes import bp as notes_bp
    app.register_blueprint(notes_bp, url_prefix="/notes")

    # alembic sets SKIP_CREATE_ALL so migrations own the schema there
    if app.config.get('AUTO_CREATE_TABLES') and not os.getenv('SKIP_CREATE_ALL'):
        with app.app_context():
            from . import models  # noqa: F401
            db.create_all()

    return app
