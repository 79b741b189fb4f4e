from typing import Optional, Tuple

from buzzer.errors import NameTaken, PartyFull
from buzzer.models import Party, Player

from .codes import player_id_for


def check_can_join(party: Party, name: str, max_players: int) -> None:
    if len(party.players) >= max_players:
        raise PartyFull(f'Party is full (max {max_players} players)')
    if party.has_name(name):
        raise NameTaken()


def add_player(party: Party, conn_id: str, name: str, max_players: int, is_host: bool = False) -> Player:
    """Append a player in join order. Checks run before the roster changes."""
    check_can_join(party, name, max_players)
    player = Player(id=player_id_for(conn_id), name=name, is_host=is_host)
    party.players.append(player)
    return player


def assign_host(party: Party) -> Optional[Player]:
    """Make sure exactly one player is host; the earliest joiner wins."""
    if not party.players:
        return None
    current = party.host
    if current is not None:
        return current
    party.players[0].is_host = True
    return party.players[0]


def remove_player(party: Party, conn_id: str) -> Tuple[Optional[Player], bool]:
    """Remove a player, promoting a new host if needed.

    Returns the removed player (None if absent) and whether the host changed.
    """
    player = party.get_player(conn_id)
    if player is None:
        return None, False
    party.players = [p for p in party.players if p.id != conn_id]
    was_host = player.is_host
    player.is_host = False
    if was_host:
        assign_host(party)
    return player, was_host and bool(party.players)
