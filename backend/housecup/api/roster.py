from flask import Blueprint, jsonify, request
from flask_login import login_required
from housecup.competition import get_competition, request_json


roster = Blueprint('roster', __name__)


# ---- Houses ----

@roster.route('/houses', methods=['GET'])
def list_houses():
    return jsonify([h.to_dict() for h in get_competition().house_repo.get_all()])


@roster.route('/houses', methods=['POST'])
@login_required
def create_house():
    data = request_json()
    house = get_competition().houses.create(data)
    return jsonify(house.to_dict()), 201


@roster.route('/houses/<string:house_id>', methods=['GET'])
def get_house(house_id):
    return jsonify(get_competition().houses.get(house_id).to_dict())


@roster.route('/houses/<string:house_id>', methods=['PATCH'])
@login_required
def update_house(house_id):
    data = request_json()
    house = get_competition().houses.update(house_id, data)
    return jsonify(house.to_dict())


@roster.route('/houses/<string:house_id>', methods=['DELETE'])
@login_required
def delete_house(house_id):
    get_competition().houses.delete(house_id)
    return jsonify({'message': 'House deleted'})


# ---- Players ----

@roster.route('/players', methods=['GET'])
def list_players():
    players = get_competition().player_repo.get_all()
    category_id = request.args.get('category')
    house_id = request.args.get('house')
    if category_id:
        players = [p for p in players if p.category_id == category_id]
    if house_id:
        players = [p for p in players if p.house_id == house_id]
    return jsonify([p.to_dict() for p in players])


@roster.route('/players', methods=['POST'])
@login_required
def create_player():
    data = request_json()
    player = get_competition().players.create(data)
    return jsonify(player.to_dict()), 201


@roster.route('/players/<string:player_id>', methods=['GET'])
def get_player(player_id):
    return jsonify(get_competition().players.get(player_id).to_dict())


@roster.route('/players/<string:player_id>', methods=['PATCH'])
@login_required
def update_player(player_id):
    data = request_json()
    player = get_competition().players.update(player_id, data)
    return jsonify(player.to_dict())


@roster.route('/players/<string:player_id>', methods=['DELETE'])
@login_required
def delete_player(player_id):
    get_competition().players.delete(player_id)
    return jsonify({'message': 'Player deleted'})


# ---- Categories ----

@roster.route('/categories', methods=['GET'])
def list_categories():
    return jsonify([c.to_dict() for c in get_competition().categories.all()])
