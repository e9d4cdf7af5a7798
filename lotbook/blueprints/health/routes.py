# lotbook/blueprints/health/routes.py

from flask import Blueprint, jsonify
from sqlalchemy import text

from lotbook.extensions import db

health_bp = Blueprint("health", __name__)

@health_bp.route("/")
def health():
    db.session.execute(text("SELECT 1"))
    return jsonify({"status": "healthy", "database": "ok"})
