from flask import render_template, request, redirect, url_for, flash, current_app
from flask_login import login_user, logout_user, current_user
from sqlalchemy.exc import SQLAlchemyError
from . import bp
from ...extensions import db
from .forms import LoginForm, SignupForm
from ...models.user import User


def _safe_next(target):
    # only same-site relative paths
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return url_for("dashboard.index")


@bp.route("/login", methods=["GET", "POST"])
def login():
    if current_user.is_authenticated:
        return redirect(url_for("dashboard.index"))
    form = LoginForm()
    if form.validate_on_submit():
        user = User.query.filter_by(email=form.email.data.strip().lower()).first()
        if user and user.check_password(form.password.data):
            login_user(user)
            return redirect(_safe_next(request.args.get("next")))
        flash("Invalid email or password", "danger")
    return render_template("auth/login.html", form=form)


@bp.route("/logout", methods=["POST"])
def logout():
    if current_user.is_authenticated:
        logout_user()
    return redirect(url_for("auth.login"))


@bp.route("/signup", methods=["GET", "POST"])
def signup():
    if current_user.is_authenticated:
        return redirect(url_for("dashboard.index"))
    form = SignupForm()
    if form.validate_on_submit():
        email = form.email.data.strip().lower()
        if User.query.filter_by(email=email).first():
            flash("An account with this email already exists", "danger")
        else:
            user = User(email=email)
            user.set_password(form.password.data)
            try:
                db.session.add(user)
                db.session.commit()
            except SQLAlchemyError as e:
                db.session.rollback()
                current_app.logger.warning("signup failed for %s: %s", email, e)
                flash("Could not create the account", "danger")
            else:
                login_user(user)
                flash("Account created, welcome!", "success")
                return redirect(url_for("dashboard.index"))
    return render_template("auth/signup.html", form=form)
