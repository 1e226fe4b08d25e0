from flask import Blueprint, jsonify, current_app

main = Blueprint('main', __name__)


@main.route('/')
@main.route('/health')
def health():
    """Liveness plus a snapshot of party and player counts."""
    counts = current_app.extensions['party_relay'].registry.status()
    return jsonify({'status': 'ok', **counts})
