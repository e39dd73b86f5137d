from flask import Blueprint, jsonify, request

from turntimer.services.timer import turn_timer
from turntimer.services.timer.state import ConfigKey, parse_int

timer = Blueprint('timer', __name__)


@timer.route('/state', methods=['GET'])
def get_state():
    payload = turn_timer.status()
    payload['turn_name'] = turn_timer.current_turn_name()
    return jsonify(payload)


@timer.route('/start', methods=['POST'])
def start_timer():
    data = request.get_json(silent=True) or {}
    duration = parse_int(data.get('duration')) or None
    if not turn_timer.start(duration):
        return jsonify({'error': 'Cannot start timer: Turn order is empty'}), 400
    return jsonify(turn_timer.status())


@timer.route('/stop', methods=['POST'])
def stop_timer():
    data = request.get_json(silent=True) or {}
    turn_timer.stop(silent=bool(data.get('silent')))
    return jsonify(turn_timer.status())


@timer.route('/pause', methods=['POST'])
def pause_timer():
    """Toggle pause, like the chat command."""
    if not turn_timer.state.is_running:
        return jsonify({'error': 'No timer is running'}), 400
    turn_timer.toggle_pause()
    return jsonify(turn_timer.status())


@timer.route('/next', methods=['POST'])
def next_turn():
    if not turn_timer.next_turn():
        return jsonify({'error': 'No more turns in the turn order'}), 400
    payload = turn_timer.status()
    payload['turn_name'] = turn_timer.current_turn_name()
    return jsonify(payload)


@timer.route('/previous', methods=['POST'])
def previous_turn():
    if not turn_timer.previous_turn():
        return jsonify({'error': 'No previous turns available'}), 400
    payload = turn_timer.status()
    payload['turn_name'] = turn_timer.current_turn_name()
    return jsonify(payload)


@timer.route('/add', methods=['POST'])
def add_time():
    data = request.get_json(silent=True) or {}
    if not turn_timer.add_time(parse_int(data.get('seconds')) or None):
        return jsonify({'error': 'No timer is running'}), 400
    return jsonify(turn_timer.status())


@timer.route('/set', methods=['POST'])
def set_time():
    data = request.get_json(silent=True) or {}
    seconds = parse_int(data.get('seconds'))
    if not seconds or seconds <= 0:
        return jsonify({'error': 'seconds must be a positive integer'}), 400
    if not turn_timer.set_time(seconds):
        return jsonify({'error': 'No timer is running'}), 400
    return jsonify(turn_timer.status())


@timer.route('/config', methods=['GET'])
def get_config():
    return jsonify(turn_timer.config.to_dict())


@timer.route('/config', methods=['PATCH'])
def update_config():
    data = request.get_json(silent=True) or {}
    keys = {}
    for token in data:
        key = ConfigKey.from_token(token)
        if key is None:
            return jsonify({'error': f'Unknown setting: {token}'}), 400
        keys[token] = key
    for token, key in keys.items():
        turn_timer.update_setting(key, data[token])
    return jsonify(turn_timer.config.to_dict())


@timer.route('/config/reset', methods=['POST'])
def reset_config():
    return jsonify(turn_timer.reset_config().to_dict())
