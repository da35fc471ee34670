"""Service routes."""

from flask import Blueprint, jsonify
from sqlalchemy import text

from storefront.extensions import db

main_bp = Blueprint('main', __name__)


@main_bp.route('/health', methods=['GET'])
def health():
    """Liveness check that also touches the database."""
    db.session.execute(text('SELECT 1'))
    return jsonify({'status': 'ok'})
