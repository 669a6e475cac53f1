from flask import Blueprint, jsonify, current_app
from flask_login import login_required
from housecup.competition import get_competition, request_json
from housecup.services.competition.domain import resolve_participant
from housecup.services.competition.listing import (
    completed_events,
    event_statistics,
    sort_events,
    upcoming_events,
)


events = Blueprint('events', __name__)


def _event_payload(event, players_by_id=None, houses_by_id=None):
    payload = event.to_dict()
    if event.results is None or players_by_id is None:
        return payload
    detail = []
    for result in event.results:
        participant = resolve_participant(event, result, players_by_id, houses_by_id)
        detail.append({
            'placement': result.placement,
            'participant_id': result.participant_id,
            'points': event.points_for(result.placement),
            'kind': participant.kind if participant else None,
            'name': participant.name if participant else None,
        })
    payload['results_detail'] = detail
    return payload


def _with_details(event):
    competition = get_competition()
    players_by_id = {p.id: p for p in competition.player_repo.get_all()}
    houses_by_id = {h.id: h for h in competition.house_repo.get_all()}
    return _event_payload(event, players_by_id, houses_by_id)


@events.route('', methods=['GET'])
def list_events():
    competition = get_competition()
    return jsonify([e.to_dict() for e in sort_events(competition.event_repo.get_all())])


@events.route('/upcoming', methods=['GET'])
def list_upcoming():
    competition = get_competition()
    return jsonify([e.to_dict() for e in upcoming_events(competition.event_repo.get_all())])


@events.route('/completed', methods=['GET'])
def list_completed():
    competition = get_competition()
    return jsonify([_with_details(e) for e in completed_events(competition.event_repo.get_all())])


@events.route('/stats', methods=['GET'])
def stats():
    competition = get_competition()
    return jsonify(event_statistics(competition.event_repo.get_all()))


@events.route('', methods=['POST'])
@login_required
def create_event():
    data = dict(request_json())
    competition = get_competition()
    # Fall back to the configured placement points for this category/type
    if not data.get('scoring') and data.get('category_id') and data.get('type'):
        data['scoring'] = competition.scoring_defaults.get(data['category_id'], data['type'])
    event = competition.lifecycle.create(data)
    return jsonify(event.to_dict()), 201


@events.route('/<string:event_id>', methods=['GET'])
def get_event(event_id):
    competition = get_competition()
    return jsonify(_with_details(competition.lifecycle.get(event_id)))


@events.route('/<string:event_id>', methods=['PATCH'])
@login_required
def update_event(event_id):
    data = request_json()
    event = get_competition().lifecycle.update(event_id, data)
    return jsonify(event.to_dict())


@events.route('/<string:event_id>', methods=['DELETE'])
@login_required
def delete_event(event_id):
    get_competition().lifecycle.delete(event_id)
    return jsonify({'message': 'Event deleted'})


@events.route('/<string:event_id>/start', methods=['POST'])
@login_required
def start_event(event_id):
    event = get_competition().lifecycle.start(event_id)
    return jsonify(event.to_dict())


@events.route('/<string:event_id>/complete', methods=['POST'])
@login_required
def complete_event(event_id):
    data = request_json()
    results = data.get('results') or []
    if not isinstance(results, list) or not all(isinstance(r, dict) for r in results):
        return jsonify({'error': 'results must be a list of {placement, participant_id}', 'code': 'validation_error'}), 400
    event = get_competition().lifecycle.complete(event_id, results)
    current_app.logger.info(f"[results] event={event.id} recorded={len(event.results or [])}")
    return jsonify(_with_details(event))


@events.route('/<string:event_id>/reset', methods=['POST'])
@login_required
def reset_event(event_id):
    event = get_competition().lifecycle.reset(event_id)
    return jsonify(event.to_dict())
