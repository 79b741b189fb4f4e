import logging
import random
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Optional

from buzzer.errors import AlreadyInParty, NotInParty, PartyNotFound
from buzzer.models import Party, Player

from .codes import generate_party_code
from .roster import add_player, remove_player

logger = logging.getLogger(__name__)


@dataclass
class Departure:
    party: Party
    player: Optional[Player]
    host_changed: bool
    deleted: bool


class PartyRegistry:
    """Owns the live parties and the connection -> party index.

    ``_lock`` guards both maps. Per-party state is guarded by ``party.lock``;
    callers take the party lock first and the registry lock second, never the
    other way round.
    """

    def __init__(self, channel, max_players: int = 8, rng=random):
        self.channel = channel
        self.max_players = max_players
        self.rng = rng
        # Called as on_player_removed(party, player) under the party lock
        self.on_player_removed = None
        self._parties: Dict[str, Party] = {}
        self._conn_to_code: Dict[str, str] = {}
        self._lock = threading.RLock()

    def __len__(self):
        with self._lock:
            return len(self._parties)

    def __contains__(self, code):
        with self._lock:
            return code in self._parties

    def get(self, code: str) -> Optional[Party]:
        with self._lock:
            return self._parties.get(code)

    def code_for(self, conn_id: str) -> Optional[str]:
        with self._lock:
            return self._conn_to_code.get(conn_id)

    def find(self, conn_id: str) -> Optional[Party]:
        code = self.code_for(conn_id)
        return self.get(code) if code else None

    @contextmanager
    def resolve(self, conn_id: str, missing=PartyNotFound):
        """Yield the caller's party with its lock held.

        Raises NotInParty for unindexed connections and ``missing`` when the
        party vanished between lookup and lock.
        """
        code = self.code_for(conn_id)
        if code is None:
            raise NotInParty()
        party = self.get(code)
        if party is None:
            raise missing()
        with party.lock:
            if party.closed:
                raise missing()
            if self.code_for(conn_id) != code:
                raise NotInParty()
            yield party

    def create_party(self, conn_id: str, host_name: str) -> Party:
        with self._lock:
            if conn_id in self._conn_to_code:
                raise AlreadyInParty()
            code = generate_party_code(self.__contains__, self.rng)
            party = Party(code)
            add_player(party, conn_id, host_name, self.max_players, is_host=True)
            self._parties[code] = party
            self._conn_to_code[conn_id] = code
            self.channel.enter(conn_id, code)

        with party.lock:
            logger.info(f"[party-create] party={code} host={conn_id} name={host_name!r}")
            self.channel.broadcast(code, 'party_updated', {
                'partyCode': code,
                'players': party.roster(),
            })
        return party

    def join_party(self, conn_id: str, code: str, name: str):
        if self.code_for(conn_id) is not None:
            raise AlreadyInParty()
        party = self.get(code)
        if party is None:
            raise PartyNotFound()

        with party.lock:
            if party.closed:
                raise PartyNotFound()
            with self._lock:
                if conn_id in self._conn_to_code:
                    raise AlreadyInParty()
                player = add_player(party, conn_id, name, self.max_players)
                self._conn_to_code[conn_id] = code
            self.channel.enter(conn_id, code)

            logger.info(f"[party-join] party={code} player={conn_id} name={name!r} size={len(party.players)}")
            self.channel.broadcast(code, 'party_updated', {
                'partyCode': code,
                'players': party.roster(),
                'gameState': party.game_state.to_dict() if party.game_state else None,
            })
            return party, player

    def depart(self, party: Party, conn_id: str) -> Departure:
        """Remove a connection from its party. Caller holds ``party.lock``.

        Deletes the party (and cancels its timer) once the roster is empty.
        """
        player, host_changed = remove_player(party, conn_id)
        with self._lock:
            self._conn_to_code.pop(conn_id, None)
            deleted = not party.players
            if deleted:
                party.closed = True
                party.cancel_timer()
                if self._parties.get(party.code) is party:
                    del self._parties[party.code]

        if deleted:
            logger.info(f"[party-delete] party={party.code} removed empty party")
        else:
            if host_changed:
                logger.info(f"[party-host] party={party.code} new host={party.host.id} name={party.host.name!r}")
            if player is not None and self.on_player_removed is not None:
                self.on_player_removed(party, player)
        return Departure(party=party, player=player, host_changed=host_changed, deleted=deleted)

    def leave_party(self, conn_id: str) -> Departure:
        with self.resolve(conn_id) as party:
            departure = self.depart(party, conn_id)
            self.channel.exit(conn_id, party.code)
            logger.info(f"[party-leave] party={party.code} player={conn_id}")
            if not departure.deleted:
                host = party.host
                self.channel.broadcast(party.code, 'party_updated', {
                    'partyCode': party.code,
                    'players': party.roster(),
                    'host': host.to_dict() if host else None,
                })
            return departure
