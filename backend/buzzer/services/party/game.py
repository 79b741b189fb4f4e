import logging

from buzzer.errors import (
    AlreadyAttempted,
    AlreadyBuzzed,
    BuzzLocked,
    GameNotActive,
    NotHost,
    NotInParty,
    NotYourBuzz,
    PlayerNotFound,
)
from buzzer.models import FINISHED, GameState, Party

from .scoring import compute_points, question_length

logger = logging.getLogger(__name__)


class GameStateMachine:
    """Per-party game flow: start, buzz arbitration, answers and advancing.

    Every method expects the caller to hold ``party.lock``. Scheduled
    transitions re-acquire the same lock before touching the party, so a
    firing timer is serialised with ordinary events.
    """

    def __init__(self, registry, channel, scheduler,
                 correct_advance_ms=5000, time_up_delay_ms=1800, time_up_advance_ms=5000):
        self.registry = registry
        self.channel = channel
        self.scheduler = scheduler
        self.correct_advance_ms = correct_advance_ms
        self.time_up_delay_ms = time_up_delay_ms
        self.time_up_advance_ms = time_up_advance_ms

    # ---- Events ----

    def start_game(self, party: Party, conn_id: str, questions, settings) -> None:
        self.require_host(party, conn_id, 'Only host can start game')
        party.cancel_timer()
        party.settings = settings
        party.questions = questions
        party.current_question_index = 0
        party.game_state = GameState()
        for p in party.players:
            p.score = 0

        logger.info(f"[game-start] party={party.code} host={conn_id} questions={len(questions)}")
        self.channel.broadcast(party.code, 'game_started', {
            'partyCode': party.code,
            'questions': questions,
            'settings': settings,
        })

    def buzz(self, party: Party, conn_id: str, buzz_point: int) -> None:
        state = self._active_state(party)
        if state.buzzed_player_id:
            raise AlreadyBuzzed()
        if state.buzz_locked:
            raise BuzzLocked()
        if conn_id in state.attempted:
            raise AlreadyAttempted()
        # A pending transition means the question is over, even for late joiners
        if party.timer is not None:
            raise BuzzLocked()
        player = party.get_player(conn_id)
        if player is None:
            raise NotInParty()

        state.buzzed_player_id = conn_id
        state.buzz_point = buzz_point

        logger.info(f"[buzz] party={party.code} player={conn_id} at={buzz_point}")
        self.channel.broadcast(party.code, 'player_buzzed', {
            'playerId': conn_id,
            'playerName': player.name,
            'buzzPoint': buzz_point,
        })

    def submit_answer(self, party: Party, conn_id: str, is_correct: bool) -> int:
        state = self._active_state(party)
        if state.buzzed_player_id != conn_id:
            raise NotYourBuzz()
        player = party.get_player(conn_id)
        if player is None:
            raise PlayerNotFound()

        points = compute_points(is_correct, state.buzz_point, question_length(party.current_question))
        player.score += points
        state.release_buzz()
        state.attempted.add(conn_id)
        if is_correct:
            # Nobody may buzz during the grace period before advancing
            state.buzz_locked = True

        logger.info(
            f"[answer] party={party.code} player={conn_id} "
            f"{'correct' if is_correct else 'incorrect'} points={points} score={player.score}"
        )
        self.channel.broadcast(party.code, 'answer_submitted', {
            'playerId': conn_id,
            'playerName': player.name,
            'isCorrect': is_correct,
            'points': points,
            'newScore': player.score,
            'players': party.roster(),
        })

        if is_correct:
            self._arm(party, 'advance', self.correct_advance_ms, self.advance)
        else:
            self._unlock_buzz(party, player)
            self._check_everyone_attempted(party)
        return points

    def next_question(self, party: Party, conn_id: str) -> bool:
        self._active_state(party)
        self.require_host(party, conn_id, 'Only host can advance')
        return self.advance(party)

    def advance(self, party: Party) -> bool:
        """Move to the next question or finish. Returns True once finished."""
        party.cancel_timer()
        state = party.game_state
        if state is None or not state.is_active:
            return party.is_finished

        party.current_question_index += 1
        state.reset_question()

        if party.is_finished:
            state.status = FINISHED
            logger.info(f"[finish] party={party.code} finished after {len(party.questions)} questions")
            # sorted() is stable, so ties keep join order; the roster itself is untouched
            standings = sorted(party.players, key=lambda p: p.score, reverse=True)
            self.channel.broadcast(party.code, 'game_finished', {
                'players': [p.to_dict() for p in standings],
            })
            return True

        logger.info(f"[next_question] party={party.code} index={party.current_question_index}")
        self.channel.broadcast(party.code, 'next_question', {
            'questionIndex': party.current_question_index,
        })
        return False

    def relay_reading_progress(self, party: Party, char_index: int) -> None:
        self.channel.broadcast(party.code, 'reading_progress', {'charIndex': char_index})

    def relay_answer_typing(self, party: Party, conn_id: str, answer_text: str) -> None:
        player = party.get_player(conn_id)
        if player is None:
            return
        self.channel.broadcast(party.code, 'answer_typing', {
            'playerName': player.name,
            'answerText': answer_text,
        })

    def player_left(self, party: Party, player) -> None:
        """Keep the current question playable after someone leaves mid-game."""
        state = party.game_state
        if state is None or not state.is_active:
            return
        if state.buzzed_player_id == player.id:
            state.release_buzz()
            self._unlock_buzz(party, player)
        self._check_everyone_attempted(party)

    # ---- Helpers ----

    def _active_state(self, party: Party) -> GameState:
        state = party.game_state
        if state is None or not state.is_active:
            raise GameNotActive()
        return state

    def require_host(self, party: Party, conn_id: str, message: str) -> None:
        host = party.host
        if host is None or host.id != conn_id:
            raise NotHost(message)

    def _unlock_buzz(self, party: Party, player) -> None:
        self.channel.broadcast(party.code, 'buzz_unlocked', {
            'playerName': player.name,
            'excludedPlayerId': player.id,
            'attempted': sorted(party.game_state.attempted),
        })

    def _check_everyone_attempted(self, party: Party) -> None:
        state = party.game_state
        if state.buzz_locked or state.buzzed_player_id or party.timer is not None:
            return
        if not party.players:
            return
        if all(p.id in state.attempted for p in party.players):
            logger.info(f"[time_up] party={party.code} all players attempted question {party.current_question_index}")
            self._arm(party, 'time_up', self.time_up_delay_ms, self._time_up)

    def _time_up(self, party: Party) -> None:
        self.channel.broadcast(party.code, 'time_up', {'questionIndex': party.current_question_index})
        self._arm(party, 'advance', self.time_up_advance_ms, self.advance)

    # ---- Timers ----

    def _arm(self, party: Party, label: str, delay_ms: int, action) -> None:
        party.cancel_timer()
        code = party.code
        party.timer = self.scheduler.schedule(
            code, label, delay_ms, lambda handle: self._on_timer(code, handle, action)
        )

    def _on_timer(self, code: str, handle, action) -> None:
        party = self.registry.get(code)
        if party is None:
            logger.info(f"[timer-abort] party={code} label={handle.label} party gone")
            return
        with party.lock:
            if party.closed or party.timer is not handle:
                logger.info(f"[timer-abort] party={code} label={handle.label} stale")
                return
            party.timer = None
            logger.info(f"[timer-fire] party={code} label={handle.label} index={party.current_question_index}")
            action(party)
