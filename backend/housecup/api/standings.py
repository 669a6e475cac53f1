from flask import Blueprint, jsonify, request
from flask_login import login_required
from housecup.competition import get_competition, request_json


standings = Blueprint('standings', __name__)


@standings.route('/standings', methods=['GET'])
def get_standings():
    """House and player standings; ``?category=<id>`` gives the category views."""
    aggregator = get_competition().aggregator
    category_id = request.args.get('category') or None
    return jsonify({
        'category_id': category_id,
        'house_scores': [s.to_dict() for s in aggregator.house_standings(category_id)],
        'player_scores': [s.to_dict() for s in aggregator.player_standings(category_id)],
    })


@standings.route('/scoring-defaults', methods=['GET'])
def list_scoring_defaults():
    defaults = get_competition().scoring_defaults
    return jsonify({
        'fallback': {str(k): v for k, v in defaults.fallback.items()},
        'configs': [d.to_dict() for d in defaults.all()],
    })


@standings.route('/scoring-defaults/<string:category_id>/<string:event_type>', methods=['GET'])
def get_scoring_default(category_id, event_type):
    placements = get_competition().scoring_defaults.get(category_id, event_type)
    return jsonify({str(k): v for k, v in placements.items()})


@standings.route('/scoring-defaults/<string:category_id>/<string:event_type>', methods=['PUT'])
@login_required
def set_scoring_default(category_id, event_type):
    data = request_json()
    placements = get_competition().scoring_defaults.set(category_id, event_type, data.get('placements') or {})
    return jsonify({str(k): v for k, v in placements.items()})
