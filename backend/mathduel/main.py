from flask import Blueprint, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Math Duel server!'})


@main.route('/health')
def health_check():
    return 'OK', 200
