"""Success stories: public listing and publication, which resolves a case."""
from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required
from wtforms import IntegerField, StringField, TextAreaField
from wtforms.validators import DataRequired, InputRequired, Length, NumberRange, Optional

from storage import StorageError, get_storage
from utils.case_lifecycle import CaseNotFoundError, create_success_story
from utils.forms import ApiForm, strip_or_none

success_stories_bp = Blueprint("success_stories", __name__, url_prefix="/api/success-stories")


class SuccessStoryForm(ApiForm):
    api_fields = {
        "title": "title",
        "description": "description",
        "missingPersonId": "missing_person_id",
        "photoUrl": "photo_url",
    }

    title = StringField("Title", validators=[DataRequired(), Length(max=255)], filters=[strip_or_none])
    description = TextAreaField("Description", validators=[DataRequired(), Length(max=10000)], filters=[strip_or_none])
    missing_person_id = IntegerField("Missing person", validators=[InputRequired(), NumberRange(min=1)])
    photo_url = StringField("Photo", validators=[Optional(), Length(max=1024)], filters=[strip_or_none])


@success_stories_bp.route("", methods=["GET"])
def list_success_stories():
    try:
        stories = get_storage().list_success_stories()
    except StorageError:
        current_app.logger.exception("Listing success stories failed")
        return jsonify({"message": "Failed to fetch success stories"}), 500
    return jsonify([story.to_dict() for story in stories])


@success_stories_bp.route("", methods=["POST"])
@login_required
def publish_success_story():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({"message": "Request body must be a JSON object", "errors": {}}), 400
    form = SuccessStoryForm.from_payload(payload)
    if not form.validate():
        return jsonify({"message": "Invalid data", "errors": form.api_errors()}), 400

    try:
        story = create_success_story(get_storage(), form.cleaned_data())
    except CaseNotFoundError:
        return jsonify({"message": "Missing person not found"}), 404
    except StorageError:
        current_app.logger.exception("Publishing success story failed", extra={"user_id": current_user.id})
        return jsonify({"message": "Failed to create success story"}), 500
    return jsonify(story.to_dict()), 201
