import os

from mathduel import create_app, socketio

app = create_app()

if __name__ == '__main__':
    # Use SocketIO server to enable websockets in dev
    debug = os.environ.get('FLASK_DEBUG') == '1'
    socketio.run(
        app,
        host=os.environ.get('HOST', '0.0.0.0'),
        port=int(os.environ.get('PORT', '3000')),
        debug=debug,
        allow_unsafe_werkzeug=debug,
    )
