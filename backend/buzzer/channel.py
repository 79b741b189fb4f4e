"""Messaging channel backed by Socket.IO rooms.

The party engine only ever talks to this object: ``broadcast`` fans an event
out to every member of a party, ``enter``/``exit`` manage room membership for
a single connection.
"""


def party_room(code: str) -> str:
    return f"party:{code}"


class SocketIOChannel:
    def __init__(self, sio, namespace='/ws'):
        self.sio = sio
        self.namespace = namespace

    def broadcast(self, code, event, payload=None):
        self.sio.emit(event, payload if payload is not None else {}, to=party_room(code), namespace=self.namespace)

    def enter(self, conn_id, code):
        self.sio.server.enter_room(conn_id, party_room(code), namespace=self.namespace)

    def exit(self, conn_id, code):
        self.sio.server.leave_room(conn_id, party_room(code), namespace=self.namespace)
