"""Core data models for accounts, missing-person cases, and success stories."""
from datetime import datetime, timezone

from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from extensions import db


def utcnow() -> datetime:
	"""Naive UTC timestamp, the reference time for every stored datetime."""
	return datetime.now(timezone.utc).replace(tzinfo=None)


def _iso(value: datetime | None) -> str | None:
	return value.isoformat() if value else None


CASE_STATUSES: tuple[str, ...] = (
	"missing",
	"found",
)

BLOOD_TYPES: tuple[str, ...] = (
	"A+",
	"A-",
	"B+",
	"B-",
	"AB+",
	"AB-",
	"O+",
	"O-",
)

# Fields an owner may replace through an update.
CASE_MUTABLE_FIELDS: tuple[str, ...] = (
	"name",
	"age",
	"gender",
	"height",
	"blood_type",
	"characteristics",
	"last_location",
	"last_seen_date",
	"disappearance_circumstances",
	"status",
	"contact_name",
	"contact_phone",
	"contact_email",
	"photo_url",
)


class User(UserMixin, db.Model):
	__tablename__ = "users"

	id = db.Column(db.Integer, primary_key=True)
	username = db.Column(db.String(80), unique=True, nullable=False, index=True)
	password_hash = db.Column(db.String(255), nullable=False)
	email = db.Column(db.String(255), unique=True, nullable=False, index=True)
	name = db.Column(db.String(150), nullable=False)
	created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

	cases = db.relationship("MissingPerson", back_populates="reporter", lazy="dynamic")

	def set_password(self, password: str) -> None:
		self.password_hash = generate_password_hash(password, method="pbkdf2:sha256", salt_length=16)

	def check_password(self, password: str) -> bool:
		return check_password_hash(self.password_hash, password)

	def to_dict(self) -> dict:
		return {
			"id": self.id,
			"username": self.username,
			"email": self.email,
			"name": self.name,
			"createdAt": _iso(self.created_at),
		}


class MissingPerson(db.Model):
	__tablename__ = "missing_persons"

	id = db.Column(db.Integer, primary_key=True)
	name = db.Column(db.String(200), nullable=False, index=True)
	age = db.Column(db.Integer, nullable=False, index=True)
	gender = db.Column(db.String(50), nullable=False, index=True)
	height = db.Column(db.String(50), nullable=True)
	blood_type = db.Column(db.String(3), nullable=True)
	characteristics = db.Column(db.Text, nullable=True)
	last_location = db.Column(db.String(255), nullable=False)
	last_seen_date = db.Column(db.DateTime, nullable=False, index=True)
	disappearance_circumstances = db.Column(db.Text, nullable=True)
	status = db.Column(db.String(20), nullable=False, default="missing", index=True)
	contact_name = db.Column(db.String(150), nullable=False)
	contact_phone = db.Column(db.String(50), nullable=False)
	contact_email = db.Column(db.String(255), nullable=True)
	reported_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
	photo_url = db.Column(db.String(1024), nullable=True)
	created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)
	updated_at = db.Column(db.DateTime, default=utcnow, nullable=False)

	__table_args__ = (
		db.CheckConstraint("status IN ('missing','found')", name="status"),
	)

	reporter = db.relationship("User", back_populates="cases")
	success_stories = db.relationship("SuccessStory", back_populates="missing_person", lazy="dynamic")

	@property
	def is_found(self) -> bool:
		return self.status == "found"

	def to_dict(self) -> dict:
		return {
			"id": self.id,
			"name": self.name,
			"age": self.age,
			"gender": self.gender,
			"height": self.height,
			"bloodType": self.blood_type,
			"characteristics": self.characteristics,
			"lastLocation": self.last_location,
			"lastSeenDate": _iso(self.last_seen_date),
			"disappearanceCircumstances": self.disappearance_circumstances,
			"status": self.status,
			"contactName": self.contact_name,
			"contactPhone": self.contact_phone,
			"contactEmail": self.contact_email,
			"reportedBy": self.reported_by,
			"photoUrl": self.photo_url,
			"createdAt": _iso(self.created_at),
			"updatedAt": _iso(self.updated_at),
		}


class SuccessStory(db.Model):
	__tablename__ = "success_stories"

	id = db.Column(db.Integer, primary_key=True)
	title = db.Column(db.String(255), nullable=False)
	description = db.Column(db.Text, nullable=False)
	missing_person_id = db.Column(db.Integer, db.ForeignKey("missing_persons.id"), nullable=False, index=True)
	photo_url = db.Column(db.String(1024), nullable=True)
	created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)

	missing_person = db.relationship("MissingPerson", back_populates="success_stories")

	def to_dict(self) -> dict:
		return {
			"id": self.id,
			"title": self.title,
			"description": self.description,
			"missingPersonId": self.missing_person_id,
			"photoUrl": self.photo_url,
			"createdAt": _iso(self.created_at),
		}
