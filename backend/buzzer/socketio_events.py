import functools
import logging

from flask import current_app, request
from flask_socketio import emit

from buzzer import socketio
from buzzer.errors import BuzzerError
from buzzer.payloads import (
    AnswerTyping,
    BuzzRequest,
    CreatePartyRequest,
    JoinPartyRequest,
    ReadingProgress,
    StartGameRequest,
    SubmitAnswerRequest,
)

logger = logging.getLogger(__name__)


def _service():
    return current_app.extensions['buzzer']


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _replies(handler):
    """Turn a handler's result or BuzzerError into the acknowledgement payload."""

    @functools.wraps(handler)
    def wrapper(data=None):
        try:
            result = handler(data)
        except BuzzerError as exc:
            logger.info(f"[rejected] event={handler.__name__} sid={_get_sid()} code={exc.code} reason={exc}")
            return exc.to_reply()
        reply = {'success': True}
        reply.update(result or {})
        return reply

    return wrapper


def handle_connect(auth=None):
    logger.info(f"[connect] sid={_get_sid()}")
    emit('connected', {'message': 'Connected', 'playerId': _get_sid()})


def handle_disconnect(*args):
    # No reply channel exists; a lost connection is an implicit leave
    _service().disconnect(_get_sid())
    logger.info(f"[disconnect] sid={_get_sid()}")


@_replies
def handle_create_party(data):
    req = CreatePartyRequest.from_payload(data)
    party = _service().create_party(_get_sid(), req)
    return {'partyCode': party.code, 'playerId': _get_sid()}


@_replies
def handle_join_party(data):
    req = JoinPartyRequest.from_payload(data)
    party, player = _service().join_party(_get_sid(), req)
    return {'playerId': player.id, 'party': party.to_dict()}


@_replies
def handle_leave_party(data):
    _service().leave_party(_get_sid())


@_replies
def handle_start_game(data):
    req = StartGameRequest.from_payload(data)
    _service().start_game(_get_sid(), req)


@_replies
def handle_buzz(data):
    _service().buzz(_get_sid(), BuzzRequest.from_payload(data))


@_replies
def handle_submit_answer(data):
    _service().submit_answer(_get_sid(), SubmitAnswerRequest.from_payload(data))


@_replies
def handle_next_question(data):
    finished = _service().next_question(_get_sid())
    return {'finished': finished}


def handle_reading_progress(data=None):
    _service().reading_progress(_get_sid(), ReadingProgress.from_payload(data))


def handle_answer_typing(data=None):
    _service().answer_typing(_get_sid(), AnswerTyping.from_payload(data))


def handle_ping(data=None):
    emit('pong', data or {})


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on the party namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('create_party', handle_create_party, namespace=namespace)
    socketio.on_event('join_party', handle_join_party, namespace=namespace)
    socketio.on_event('leave_party', handle_leave_party, namespace=namespace)
    socketio.on_event('start_game', handle_start_game, namespace=namespace)
    socketio.on_event('buzz', handle_buzz, namespace=namespace)
    socketio.on_event('submit_answer', handle_submit_answer, namespace=namespace)
    socketio.on_event('next_question', handle_next_question, namespace=namespace)
    socketio.on_event('reading_progress', handle_reading_progress, namespace=namespace)
    socketio.on_event('answer_typing', handle_answer_typing, namespace=namespace)
    socketio.on_event('ping', handle_ping, namespace=namespace)
