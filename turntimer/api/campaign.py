from flask import Blueprint, jsonify, request

from turntimer import db, scene
from turntimer.models import Campaign, Character, Token
from turntimer.services.timer import turn_timer
from turntimer.services.timer.turn_order import TurnEntry, get_raw_turn_order, set_turn_order

campaign = Blueprint('campaign', __name__)


@campaign.route('/turnorder', methods=['GET'])
def get_turnorder():
    return jsonify({
        'turnorder': get_raw_turn_order(),
        'current_turn': turn_timer.current_turn_name(),
    })


@campaign.route('/turnorder', methods=['PUT'])
def put_turnorder():
    """Replace the turn order, as the tabletop UI would; the timer sees it as an external change."""
    data = request.get_json(silent=True) or {}
    items = data.get('turnorder')
    if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
        return jsonify({'error': 'turnorder must be a list of entries'}), 400
    set_turn_order([TurnEntry.from_dict(item) for item in items])
    changed = turn_timer.handle_turn_order_change()
    return jsonify({
        'turnorder': get_raw_turn_order(),
        'current_turn': turn_timer.current_turn_name(),
        'turn_changed': changed,
    })


@campaign.route('/characters', methods=['POST'])
def create_character():
    data = request.get_json(silent=True) or {}
    name = data.get('name')
    if not name:
        return jsonify({'error': 'name is required'}), 400
    character = Character(name=name)
    db.session.add(character)
    db.session.commit()
    return jsonify(character.to_dict()), 201


@campaign.route('/tokens', methods=['POST'])
def create_token():
    data = request.get_json(silent=True) or {}
    represents = data.get('represents')
    if represents and not Character.query.get(represents):
        return jsonify({'error': 'Character not found'}), 404
    token = Token(
        name=data.get('name'),
        represents=represents or None,
        page_id=Campaign.current().player_page_id,
    )
    db.session.add(token)
    db.session.commit()
    return jsonify(token.to_dict()), 201


@campaign.route('/objects/<string:object_id>', methods=['GET'])
def get_object(object_id):
    obj = scene.get_text(object_id)
    if obj is None:
        return jsonify({'error': 'Object not found'}), 404
    return jsonify(obj.to_dict())


@campaign.route('/objects/<string:object_id>', methods=['PATCH'])
def move_object(object_id):
    data = request.get_json(silent=True) or {}
    try:
        left = float(data.get('left'))
        top = float(data.get('top'))
    except (TypeError, ValueError):
        return jsonify({'error': 'left and top are required'}), 400
    obj = scene.move_text(object_id, left, top)
    if obj is None:
        return jsonify({'error': 'Object not found'}), 404
    return jsonify(obj.to_dict())
