"""Room channel: the broadcast scope for one match.

Game code talks to connections only through this interface, so the engine
never needs a Socket.IO request context (timer callbacks have none).
"""


class SocketIOChannel:
    def __init__(self, socketio, namespace='/'):
        self.socketio = socketio
        self.namespace = namespace

    def join(self, sid: str, room: str) -> None:
        self.socketio.server.enter_room(sid, room, namespace=self.namespace)

    def leave(self, sid: str, room: str) -> None:
        self.socketio.server.leave_room(sid, room, namespace=self.namespace)

    def close(self, room: str) -> None:
        self.socketio.server.close_room(room, namespace=self.namespace)

    def broadcast(self, room: str, event: str, payload=None) -> None:
        self.socketio.emit(event, payload if payload is not None else {}, to=room, namespace=self.namespace)

    def send(self, sid: str, event: str, payload=None) -> None:
        self.socketio.emit(event, payload if payload is not None else {}, to=sid, namespace=self.namespace)
