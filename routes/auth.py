"""Account registration and session login for the JSON API."""
from flask import Blueprint, current_app, jsonify, request, session
from flask_login import current_user, login_user, logout_user
from wtforms import BooleanField, EmailField, PasswordField, StringField
from wtforms.validators import DataRequired, Email, Length, Regexp, ValidationError

from models import User, utcnow
from storage import StorageError, get_storage
from utils.forms import ApiForm, strip_or_none
from utils.security import password_meets_policy

auth_bp = Blueprint("auth", __name__, url_prefix="/api")


class RegistrationForm(ApiForm):
    api_fields = {
        "username": "username",
        "password": "password",
        "email": "email",
        "name": "name",
    }

    username = StringField(
        "Username",
        validators=[
            DataRequired(),
            Length(min=3, max=80),
            Regexp(r"^[\w.\-]+$", message="Use letters, digits, dots, dashes or underscores."),
        ],
        filters=[strip_or_none],
    )
    password = PasswordField("Password", validators=[DataRequired(), Length(max=128)])
    email = EmailField("Email", validators=[DataRequired(), Email(), Length(max=255)], filters=[strip_or_none])
    name = StringField("Full Name", validators=[DataRequired(), Length(max=150)], filters=[strip_or_none])

    def validate_username(self, field):
        if get_storage().get_user_by_username(field.data):
            raise ValidationError("Username already exists.")

    def validate_email(self, field):
        if get_storage().get_user_by_email(field.data):
            raise ValidationError("An account with this email already exists.")

    def validate_password(self, field):
        ok, reason = password_meets_policy(field.data, current_app.config.get("PASSWORD_MIN_LENGTH", 8))
        if not ok:
            raise ValidationError(reason)


class LoginForm(ApiForm):
    api_fields = {
        "username": "username",
        "password": "password",
        "rememberMe": "remember_me",
    }

    username = StringField("Username", validators=[DataRequired()], filters=[strip_or_none])
    password = PasswordField("Password", validators=[DataRequired()])
    remember_me = BooleanField("Remember me", false_values=("false", "False", "0", ""))


def _payload() -> dict:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


@auth_bp.route("/register", methods=["POST"])
def register():
    form = RegistrationForm.from_payload(_payload())
    if not form.validate():
        return jsonify({"message": "Invalid data", "errors": form.api_errors()}), 400

    user = User(
        username=form.username.data,
        email=form.email.data.lower(),
        name=form.name.data,
        created_at=utcnow(),
    )
    user.set_password(form.password.data)
    try:
        get_storage().create_user(user)
    except StorageError:
        current_app.logger.warning("Registration conflict", extra={"username": form.username.data})
        return jsonify({"message": "Unable to register with the provided details"}), 400

    login_user(user)
    session.permanent = True
    current_app.logger.info("User registered", extra={"user_id": user.id})
    return jsonify(user.to_dict()), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    form = LoginForm.from_payload(_payload())
    if not form.validate():
        return jsonify({"message": "Invalid data", "errors": form.api_errors()}), 400

    user = get_storage().get_user_by_username(form.username.data)
    if not user or not user.check_password(form.password.data):
        current_app.logger.warning(
            "Login failed", extra={"username": form.username.data, "ip_address": request.remote_addr}
        )
        return jsonify({"message": "Invalid username or password"}), 401

    login_user(user, remember=bool(form.remember_me.data))
    session.permanent = True
    current_app.logger.info("User logged in", extra={"user_id": user.id})
    return jsonify(user.to_dict())


@auth_bp.route("/logout", methods=["POST"])
def logout():
    user_id = current_user.get_id() if current_user.is_authenticated else None
    logout_user()
    session.clear()
    current_app.logger.info("User logged out", extra={"user_id": user_id})
    return jsonify({"message": "Logged out"})


@auth_bp.route("/user", methods=["GET"])
def me():
    if not current_user.is_authenticated:
        return jsonify({"message": "Authentication required"}), 401
    return jsonify(current_user.to_dict())
