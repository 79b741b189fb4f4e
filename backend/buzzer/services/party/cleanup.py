import logging
from typing import Optional

from .registry import Departure, PartyRegistry

logger = logging.getLogger(__name__)


class DisconnectCoordinator:
    """Folds a lost connection into the same removal as an explicit leave.

    There is nobody to reply to, so nothing is raised: an unknown or already
    removed connection is a no-op.
    """

    def __init__(self, registry: PartyRegistry, channel):
        self.registry = registry
        self.channel = channel

    def handle_disconnect(self, conn_id: str) -> Optional[Departure]:
        code = self.registry.code_for(conn_id)
        if code is None:
            return None
        party = self.registry.get(code)
        if party is None:
            return None

        with party.lock:
            if party.closed or self.registry.code_for(conn_id) != code:
                return None
            departure = self.registry.depart(party, conn_id)
            logger.info(f"[disconnect] party={code} player={conn_id} deleted={departure.deleted}")
            if not departure.deleted:
                host = party.host
                self.channel.broadcast(code, 'player_disconnected', {
                    'playerId': conn_id,
                    'remainingPlayers': party.roster(),
                    'newHost': host.to_dict() if host else None,
                })
            return departure
