from flask import Blueprint, current_app, jsonify

duel = Blueprint('duel', __name__)


def _services():
    return current_app.extensions['mathduel']


@duel.route('/leaderboard', methods=['GET'])
def get_leaderboard():
    """Returns the win count per player name."""
    return jsonify(_services().leaderboard.snapshot())


@duel.route('/matches/<string:code>', methods=['GET'])
def get_match_state(code):
    """Returns the public state of a live match."""
    services = _services()
    with services.engine.lock:
        match = services.registry.get(code)
        if not match:
            return jsonify({'error': 'Game not found'}), 404
        payload = match.to_dict()
    payload['round_duration'] = services.engine.settings.round_duration
    return jsonify(payload)
