import random


def generate_party_code(is_taken, rng=random) -> str:
    """Generate a 4-digit party code not currently held by a live party."""
    while True:
        code = str(rng.randint(1000, 9999))
        if not is_taken(code):
            return code


def player_id_for(conn_id: str) -> str:
    # Connection ids double as player ids for the lifetime of the connection
    return conn_id
