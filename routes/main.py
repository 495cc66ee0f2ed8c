from datetime import datetime, timezone
from flask import Blueprint, jsonify, current_app

main_bp = Blueprint('main', __name__)


@main_bp.route('/health')
def health():
    """Liveness check."""
    return jsonify({
        'status': 'ok',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'environment': current_app.config.get('ENVIRONMENT')
    })
