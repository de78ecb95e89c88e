"""Blueprint registration, health checks, and public statistics."""
from flask import Blueprint, current_app, jsonify
from flask_wtf.csrf import generate_csrf

from storage import StorageError, get_storage
from utils.statistics import compute_statistics
from .auth import auth_bp
from .missing_persons import missing_persons_bp
from .success_stories import success_stories_bp

main_bp = Blueprint("main", __name__, url_prefix="/api")


@main_bp.route("/test", methods=["GET"])
def liveness():
    return "Server is running", 200, {"Content-Type": "text/plain; charset=utf-8"}


@main_bp.route("/test-db", methods=["GET"])
def database_check():
    try:
        result = get_storage().ping()
    except StorageError:
        current_app.logger.exception("Database health check failed")
        return jsonify({"connected": False, "error": "Database unreachable"}), 500
    return jsonify({"connected": True, "result": result})


@main_bp.route("/csrf-token", methods=["GET"])
def csrf_token():
    return jsonify({"csrfToken": generate_csrf()})


@main_bp.route("/statistics", methods=["GET"])
def statistics():
    return jsonify(compute_statistics(get_storage()))


__all__ = ["main_bp", "auth_bp", "missing_persons_bp", "success_stories_bp"]
