import random

from buzzer.errors import GameNotActive
from buzzer.payloads import (
    AnswerTyping,
    BuzzRequest,
    CreatePartyRequest,
    JoinPartyRequest,
    ReadingProgress,
    StartGameRequest,
    SubmitAnswerRequest,
)

from .cleanup import DisconnectCoordinator
from .game import GameStateMachine
from .registry import PartyRegistry


class PartyService:
    """Entry point for every party event.

    One instance per process, created by ``create_app`` and kept in
    ``app.extensions['buzzer']``. Each method resolves the caller's party,
    holds its lock for the whole mutation and raises ``BuzzerError`` on
    rejection.
    """

    def __init__(self, channel, scheduler, max_players=8, correct_advance_ms=5000,
                 time_up_delay_ms=1800, time_up_advance_ms=5000, rng=random):
        self.channel = channel
        self.scheduler = scheduler
        self.registry = PartyRegistry(channel, max_players=max_players, rng=rng)
        self.game = GameStateMachine(
            self.registry, channel, scheduler,
            correct_advance_ms=correct_advance_ms,
            time_up_delay_ms=time_up_delay_ms,
            time_up_advance_ms=time_up_advance_ms,
        )
        self.registry.on_player_removed = self.game.player_left
        self.cleanup = DisconnectCoordinator(self.registry, channel)

    @classmethod
    def from_config(cls, config, channel, scheduler):
        return cls(
            channel,
            scheduler,
            max_players=int(config.get('MAX_PLAYERS', 8)),
            correct_advance_ms=int(config.get('CORRECT_ADVANCE_MS', 5000)),
            time_up_delay_ms=int(config.get('TIME_UP_DELAY_MS', 1800)),
            time_up_advance_ms=int(config.get('TIME_UP_ADVANCE_MS', 5000)),
        )

    @property
    def party_count(self) -> int:
        return len(self.registry)

    # ---- Party management ----

    def create_party(self, conn_id: str, req: CreatePartyRequest):
        return self.registry.create_party(conn_id, req.player_name)

    def join_party(self, conn_id: str, req: JoinPartyRequest):
        return self.registry.join_party(conn_id, req.party_code, req.player_name)

    def leave_party(self, conn_id: str):
        return self.registry.leave_party(conn_id)

    def disconnect(self, conn_id: str):
        return self.cleanup.handle_disconnect(conn_id)

    # ---- Game flow ----

    def start_game(self, conn_id: str, req: StartGameRequest) -> None:
        with self.registry.resolve(conn_id) as party:
            self.game.require_host(party, conn_id, 'Only host can start game')
            req.validate()
            self.game.start_game(party, conn_id, req.questions, req.settings)

    def buzz(self, conn_id: str, req: BuzzRequest) -> None:
        with self.registry.resolve(conn_id, missing=GameNotActive) as party:
            self.game.buzz(party, conn_id, req.buzz_point)

    def submit_answer(self, conn_id: str, req: SubmitAnswerRequest) -> int:
        with self.registry.resolve(conn_id, missing=GameNotActive) as party:
            return self.game.submit_answer(party, conn_id, req.is_correct)

    def next_question(self, conn_id: str) -> bool:
        with self.registry.resolve(conn_id, missing=GameNotActive) as party:
            return self.game.next_question(party, conn_id)

    # ---- Passthrough ----

    def reading_progress(self, conn_id: str, msg: ReadingProgress) -> None:
        party = self.registry.find(conn_id)
        if party is None:
            return
        with party.lock:
            if not party.closed:
                self.game.relay_reading_progress(party, msg.char_index)

    def answer_typing(self, conn_id: str, msg: AnswerTyping) -> None:
        party = self.registry.find(conn_id)
        if party is None:
            return
        with party.lock:
            if not party.closed:
                self.game.relay_answer_typing(party, conn_id, msg.answer_text)
