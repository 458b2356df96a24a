from functools import wraps
from typing import Dict

from flask import current_app, request
from flask_socketio import emit

from mathduel import socketio
from mathduel.errors import DuelError, PreconditionFailed


# Display name per connected socket
_sid_to_name: Dict[str, str] = {}


def _get_sid() -> str:
    return request.sid  # type: ignore


def _duel():
    return current_app.extensions['mathduel']


def _payload(data) -> dict:
    return data if isinstance(data, dict) else {}


def serialized(handler):
    """Run the handler under the engine lock, reporting recoverable errors to the sender."""
    @wraps(handler)
    def wrapper(*args, **kwargs):
        duel = _duel()
        with duel.engine.lock:
            try:
                return handler(*args, **kwargs)
            except DuelError as exc:
                current_app.logger.info(
                    f"[rejected] event={handler.__name__} sid={_get_sid()} "
                    f"error={type(exc).__name__} reason={exc.message}"
                )
                if exc.notify:
                    emit('error', {'message': exc.message})
    return wrapper


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    sid = _get_sid()
    _sid_to_name.pop(sid, None)
    deleted = _duel().engine.handle_disconnect(sid)
    current_app.logger.info(f"[disconnect] sid={sid} reason={reason} matches_closed={len(deleted)}")


def handle_set_name(data=None):
    name = _payload(data).get('name')
    name = str(name).strip() if name is not None else ''
    if not name:
        return
    _sid_to_name[_get_sid()] = name


def handle_get_leaderboard(data=None):
    emit('leaderboard', _duel().leaderboard.snapshot())


def _require_name():
    name = _sid_to_name.get(_get_sid())
    if not name:
        raise PreconditionFailed('Name required')
    return name


@serialized
def handle_create_game(data=None):
    name = _require_name()
    sid = _get_sid()
    duel = _duel()
    match = duel.registry.create_match(sid, name)
    duel.channel.join(sid, match.code)
    current_app.logger.info(f"[create] code={match.code} sid={sid} name={name}")
    emit('gameCreated', {'code': match.code})


@serialized
def handle_join_game(data=None):
    name = _require_name()
    code = _payload(data).get('code')
    if not code:
        raise PreconditionFailed('code is required', notify=True)
    code = str(code).strip().upper()
    sid = _get_sid()
    duel = _duel()
    match = duel.registry.join_match(code, sid, name)
    duel.channel.join(sid, match.code)
    current_app.logger.info(f"[join] code={match.code} sid={sid} name={name}")
    emit('joinedGame', {'code': match.code})
    duel.engine.start_round(match.code)


@serialized
def handle_random_game(data=None):
    name = _require_name()
    sid = _get_sid()
    duel = _duel()
    result = duel.registry.random_match(sid, name)
    if result is None:
        current_app.logger.info(f"[random-stale] sid={sid} dropped stale queue entry")
        return
    duel.channel.join(sid, result.match.code)
    if result.created:
        current_app.logger.info(f"[random-wait] code={result.match.code} sid={sid} name={name}")
        emit('gameCreated', {'code': result.match.code})
        return
    current_app.logger.info(f"[random-paired] code={result.match.code} sid={sid} opponent={result.opponent_id}")
    emit('joinedGame', {'code': result.match.code})
    duel.channel.send(result.opponent_id, 'playerMatched', {})
    duel.engine.start_round(result.match.code)


@serialized
def handle_answer(data=None):
    payload = _payload(data)
    _duel().engine.submit_answer(payload.get('code'), _get_sid(), payload.get('val'))


@serialized
def handle_direction(data=None):
    payload = _payload(data)
    _duel().engine.submit_direction(payload.get('code'), _get_sid(), payload.get('dir'))


def register_socketio_handlers(namespace: str = '/') -> None:
    """Bind the duel events to the shared socketio instance on one namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('setName', handle_set_name, namespace=namespace)
    socketio.on_event('getLeaderboard', handle_get_leaderboard, namespace=namespace)
    socketio.on_event('createGame', handle_create_game, namespace=namespace)
    socketio.on_event('joinGame', handle_join_game, namespace=namespace)
    socketio.on_event('randomGame', handle_random_game, namespace=namespace)
    socketio.on_event('answer', handle_answer, namespace=namespace)
    socketio.on_event('direction', handle_direction, namespace=namespace)
