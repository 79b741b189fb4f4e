from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the buzzer party server!'})


@main.route('/health')
def health():
    service = current_app.extensions['buzzer']
    return jsonify({'status': 'ok', 'parties': service.party_count})
