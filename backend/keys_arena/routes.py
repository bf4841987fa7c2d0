from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Keys Arena game server!'})

@main.route('/health')
def health_check():
    return jsonify({'status': 'ok', 'service': 'keys-arena'}), 200

@main.route('/api/rooms')
def list_rooms():
    return jsonify(current_app.extensions['room_engine'].lobby_data())
