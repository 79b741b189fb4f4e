import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

ACTIVE = 'active'
FINISHED = 'finished'


@dataclass
class Player:
    id: str
    name: str
    score: int = 0
    is_host: bool = False

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'score': self.score,
            'isHost': self.is_host,
        }


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class GameState:
    status: str = ACTIVE
    buzzed_player_id: Optional[str] = None
    buzz_point: int = 0
    # Players who have used their attempt on the current question
    attempted: Set[str] = field(default_factory=set)
    buzz_locked: bool = False
    start_time: int = field(default_factory=_now_ms)

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE

    def release_buzz(self) -> None:
        self.buzzed_player_id = None
        self.buzz_point = 0

    def reset_question(self) -> None:
        """Clear every per-question field ahead of the next question."""
        self.release_buzz()
        self.attempted = set()
        self.buzz_locked = False

    def to_dict(self):
        return {
            'status': self.status,
            'buzzedPlayerId': self.buzzed_player_id,
            'buzzPoint': self.buzz_point,
            'attempted': sorted(self.attempted),
            'buzzLocked': self.buzz_locked,
            'startTime': self.start_time,
        }


class Party:
    """One game session: roster, questions and the optional game state.

    All fields are guarded by ``lock``. ``timer`` holds the single pending
    scheduled transition, if any. ``closed`` is set once the party has been
    removed from the registry.
    """

    def __init__(self, code: str):
        self.code = code
        self.players: List[Player] = []
        self.settings: Dict[str, Any] = {}
        self.questions: List[Any] = []
        self.current_question_index = -1
        self.game_state: Optional[GameState] = None
        self.timer = None
        self.closed = False
        self.lock = threading.RLock()

    @property
    def host(self) -> Optional[Player]:
        return next((p for p in self.players if p.is_host), None)

    @property
    def current_question(self):
        if 0 <= self.current_question_index < len(self.questions):
            return self.questions[self.current_question_index]
        return None

    @property
    def is_finished(self) -> bool:
        return self.current_question_index >= len(self.questions)

    def get_player(self, player_id: str) -> Optional[Player]:
        return next((p for p in self.players if p.id == player_id), None)

    def has_name(self, name: str) -> bool:
        folded = name.casefold()
        return any(p.name.casefold() == folded for p in self.players)

    def cancel_timer(self) -> None:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None

    def roster(self):
        return [p.to_dict() for p in self.players]

    def to_dict(self):
        host = self.host
        return {
            'code': self.code,
            'host': host.to_dict() if host else None,
            'players': self.roster(),
            'settings': self.settings,
            'questions': self.questions,
            'currentQuestionIndex': self.current_question_index,
            'gameState': self.game_state.to_dict() if self.game_state else None,
        }
