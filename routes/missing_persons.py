"""Missing-person case search, detail, intake, and owner updates."""
from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required
from wtforms import EmailField, IntegerField, StringField, TextAreaField
from wtforms.validators import (
    AnyOf,
    DataRequired,
    Email,
    InputRequired,
    Length,
    NumberRange,
    Optional,
)

from models import BLOOD_TYPES, CASE_STATUSES
from storage import StorageError, get_storage
from utils.case_lifecycle import (
    CaseNotFoundError,
    InvalidStatusTransitionError,
    NotCaseReporterError,
    create_case,
    ensure_case_reporter,
    update_case,
)
from utils.forms import ApiForm, IsoDateField, IsoDateTimeField, strip_or_none
from utils.search import SearchCriteria

missing_persons_bp = Blueprint("missing_persons", __name__, url_prefix="/api/missing-persons")


class SearchForm(ApiForm):
    api_fields = {
        "name": "name",
        "location": "location",
        "age": "age",
        "gender": "gender",
        "status": "status",
        "lastSeenDate": "last_seen_date",
    }

    name = StringField("Name", validators=[Optional(), Length(max=200)], filters=[strip_or_none])
    location = StringField("Location", validators=[Optional(), Length(max=255)], filters=[strip_or_none])
    age = IntegerField("Age", validators=[Optional()])
    gender = StringField("Gender", validators=[Optional(), Length(max=50)])
    status = StringField("Status", validators=[Optional(), AnyOf(CASE_STATUSES)])
    last_seen_date = IsoDateField("Last seen date", validators=[Optional()])

    def criteria(self) -> SearchCriteria:
        return SearchCriteria(**self.cleaned_data())


class MissingPersonForm(ApiForm):
    api_fields = {
        "name": "name",
        "age": "age",
        "gender": "gender",
        "height": "height",
        "bloodType": "blood_type",
        "characteristics": "characteristics",
        "lastLocation": "last_location",
        "lastSeenDate": "last_seen_date",
        "disappearanceCircumstances": "disappearance_circumstances",
        "status": "status",
        "contactName": "contact_name",
        "contactPhone": "contact_phone",
        "contactEmail": "contact_email",
        "photoUrl": "photo_url",
    }

    name = StringField("Name", validators=[DataRequired(), Length(max=200)], filters=[strip_or_none])
    age = IntegerField("Age", validators=[InputRequired(), NumberRange(min=0, max=150)])
    gender = StringField("Gender", validators=[DataRequired(), Length(max=50)], filters=[strip_or_none])
    height = StringField("Height", validators=[Optional(), Length(max=50)], filters=[strip_or_none])
    blood_type = StringField("Blood type", validators=[Optional(), AnyOf(BLOOD_TYPES)], filters=[strip_or_none])
    characteristics = TextAreaField("Characteristics", validators=[Optional(), Length(max=5000)], filters=[strip_or_none])
    last_location = StringField("Last known location", validators=[DataRequired(), Length(max=255)], filters=[strip_or_none])
    last_seen_date = IsoDateTimeField("Last seen", validators=[DataRequired()])
    disappearance_circumstances = TextAreaField(
        "Circumstances", validators=[Optional(), Length(max=5000)], filters=[strip_or_none]
    )
    status = StringField("Status", validators=[Optional(), AnyOf(CASE_STATUSES)], filters=[strip_or_none])
    contact_name = StringField("Contact name", validators=[DataRequired(), Length(max=150)], filters=[strip_or_none])
    contact_phone = StringField("Contact phone", validators=[DataRequired(), Length(max=50)], filters=[strip_or_none])
    contact_email = EmailField("Contact email", validators=[Optional(), Email(), Length(max=255)], filters=[strip_or_none])
    photo_url = StringField("Photo", validators=[Optional(), Length(max=1024)], filters=[strip_or_none])


def _json_payload():
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else None


def _invalid(message: str, errors: dict | None = None):
    return jsonify({"message": message, "errors": errors or {}}), 400


@missing_persons_bp.route("", methods=["GET"])
def search_missing_persons():
    form = SearchForm.from_payload(request.args)
    if not form.validate():
        current_app.logger.info("Search rejected", extra={"errors": form.errors})
        return _invalid("Invalid search parameters", form.api_errors())

    criteria = form.criteria()
    try:
        cases = get_storage().search_cases(criteria)
    except StorageError:
        current_app.logger.exception("Search failed")
        return jsonify({"message": "Failed to fetch missing persons"}), 500
    current_app.logger.info("Search served", extra={"criteria": criteria, "matches": len(cases)})
    return jsonify([case.to_dict() for case in cases])


@missing_persons_bp.route("/<int:case_id>", methods=["GET"])
def get_missing_person(case_id: int):
    try:
        case = get_storage().get_case(case_id)
    except StorageError:
        current_app.logger.exception("Case lookup failed", extra={"case_id": case_id})
        return jsonify({"message": "Failed to fetch missing person"}), 500
    if case is None:
        return jsonify({"message": "Missing person not found"}), 404
    return jsonify(case.to_dict())


@missing_persons_bp.route("", methods=["POST"])
@login_required
def create_missing_person():
    payload = _json_payload()
    if payload is None:
        return _invalid("Request body must be a JSON object")
    form = MissingPersonForm.from_payload(payload)
    if not form.validate():
        return _invalid("Invalid data", form.api_errors())

    try:
        case = create_case(get_storage(), form.cleaned_data(), reporter_id=current_user.id)
    except InvalidStatusTransitionError as exc:
        return _invalid("Invalid data", {"status": [str(exc)]})
    except StorageError:
        current_app.logger.exception("Case creation failed")
        return jsonify({"message": "Failed to create missing person record"}), 500
    return jsonify(case.to_dict()), 201


@missing_persons_bp.route("/<int:case_id>", methods=["PUT"])
@login_required
def update_missing_person(case_id: int):
    storage = get_storage()
    try:
        ensure_case_reporter(storage, case_id, current_user.id)
    except CaseNotFoundError:
        return jsonify({"message": "Missing person not found"}), 404
    except NotCaseReporterError:
        return jsonify({"message": "Not authorized to update this record"}), 403

    payload = _json_payload()
    if payload is None:
        return _invalid("Request body must be a JSON object")
    form = MissingPersonForm.from_payload(payload)
    if not form.validate():
        return _invalid("Invalid data", form.api_errors())

    try:
        case = update_case(storage, case_id, form.cleaned_data(), user_id=current_user.id)
    except InvalidStatusTransitionError as exc:
        return _invalid("Invalid data", {"status": [str(exc)]})
    except StorageError:
        current_app.logger.exception("Case update failed", extra={"case_id": case_id})
        return jsonify({"message": "Failed to update missing person record"}), 500
    return jsonify(case.to_dict())
