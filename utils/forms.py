"""Form plumbing for validating JSON bodies and query strings with WTForms."""
from datetime import timezone
from typing import Mapping

from dateutil.parser import isoparse
from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import Field
from wtforms.widgets import TextInput

# Values the single-page client sends for unset parameters.
UNSET_MARKERS = frozenset({"", "undefined"})


def strip_or_none(value):
    if isinstance(value, str):
        return value.strip() or None
    return value


class IsoDateTimeField(Field):
    """ISO-8601 timestamp; offsets are normalized to naive UTC."""

    widget = TextInput()
    error_message = "Not a valid ISO 8601 date/time."

    def _value(self):
        return self.data.isoformat() if self.data else ""

    def process_formdata(self, valuelist):
        if not valuelist or not str(valuelist[0]).strip():
            self.data = None
            return
        try:
            parsed = isoparse(str(valuelist[0]).strip())
        except (ValueError, OverflowError) as exc:
            self.data = None
            raise ValueError(self.gettext(self.error_message)) from exc
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        self.data = self.convert(parsed)

    def convert(self, parsed):
        return parsed


class IsoDateField(IsoDateTimeField):
    """Calendar date; a full timestamp is accepted and reduced to its day."""

    error_message = "Not a valid ISO 8601 date."

    def convert(self, parsed):
        return parsed.date()


class ApiForm(FlaskForm):
    """FlaskForm fed from a JSON object or query string keyed by API names.

    ``api_fields`` maps the public camelCase key to the form field name.
    CSRF is enforced globally by CSRFProtect, not per form.
    """

    api_fields: dict[str, str] = {}

    class Meta:
        csrf = False

    @classmethod
    def from_payload(cls, payload: Mapping):
        formdata = MultiDict()
        for api_key, field_name in cls.api_fields.items():
            value = payload.get(api_key)
            if value is None or isinstance(value, (dict, list)):
                continue
            value = str(value) if not isinstance(value, str) else value
            if value.strip() in UNSET_MARKERS:
                continue
            formdata.add(field_name, value)
        return cls(formdata=formdata)

    def api_errors(self) -> dict:
        names = {field_name: api_key for api_key, field_name in self.api_fields.items()}
        return {names.get(name, name): messages for name, messages in self.errors.items()}

    def cleaned_data(self) -> dict:
        return {name: field.data for name, field in self._fields.items()}
