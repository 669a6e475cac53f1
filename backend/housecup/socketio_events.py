from flask_socketio import join_room, leave_room, emit
from flask import current_app
from housecup.competition import STANDINGS_ROOM, get_competition


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_subscribe_standings(data=None):
    """Join the standings room and send the current standings right away.

    Further ``standings_update`` pushes arrive whenever houses, players or
    events change. A ``category`` in the payload adds the filtered views.
    """
    join_room(STANDINGS_ROOM)
    aggregator = get_competition().aggregator
    payload = aggregator.standings().to_dict()
    category_id = data.get('category') if isinstance(data, dict) else None
    if category_id:
        payload['category_id'] = category_id
        payload['category_house_scores'] = [s.to_dict() for s in aggregator.house_standings(category_id)]
        payload['category_player_scores'] = [s.to_dict() for s in aggregator.player_standings(category_id)]
    current_app.logger.debug(f"[ws-subscribe] room={STANDINGS_ROOM} category={category_id}")
    emit('joined', {'room': STANDINGS_ROOM})
    emit('standings_update', payload)


def handle_unsubscribe_standings(data=None):
    leave_room(STANDINGS_ROOM)
    emit('left', {'room': STANDINGS_ROOM})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    from housecup import socketio

    handlers = {
        'connect': handle_connect,
        'subscribe_standings': handle_subscribe_standings,
        'unsubscribe_standings': handle_unsubscribe_standings,
        'ping': handle_ping,
    }
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        for name, handler in handlers.items():
            socketio.on_event(name, handler, namespace=namespace)
