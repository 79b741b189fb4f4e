"""Caller-facing errors for party and game events.

Every failure a client can trigger is a ``BuzzerError``. Handlers turn it
into a ``{'success': False, 'error': ..., 'code': ...}`` reply for the
originating connection only.
"""


class BuzzerError(Exception):
    """Base for all recoverable party/game errors."""

    message = 'Request failed'

    def __init__(self, message=None):
        super().__init__(message or self.message)

    @property
    def code(self) -> str:
        return type(self).__name__

    def to_reply(self) -> dict:
        return {'success': False, 'error': str(self), 'code': self.code}


class ValidationError(BuzzerError):
    message = 'Invalid request'


class StateError(BuzzerError):
    message = 'Not allowed right now'


class NotFoundError(BuzzerError):
    message = 'Not found'


# Validation
class InvalidName(ValidationError):
    message = 'Invalid player name'


class InvalidInput(ValidationError):
    message = 'Invalid party code or player name'


class InvalidQuestions(ValidationError):
    message = 'Invalid questions'


# State preconditions
class NotInParty(StateError):
    message = 'Not in a party'


class AlreadyInParty(StateError):
    message = 'Already in a party'


class PartyFull(StateError):
    message = 'Party is full'


class NameTaken(StateError):
    message = 'Player name already taken in this party'


class NotHost(StateError):
    message = 'Only the host can do that'


class GameNotActive(StateError):
    message = 'Game not active'


class AlreadyBuzzed(StateError):
    message = 'Someone already buzzed'


class BuzzLocked(StateError):
    message = 'Buzzing is temporarily locked'


class AlreadyAttempted(StateError):
    message = 'You have already attempted this question'


class NotYourBuzz(StateError):
    message = 'You did not buzz in'


# Not found
class PartyNotFound(NotFoundError):
    message = 'Party not found'


class PlayerNotFound(NotFoundError):
    message = 'Player not found'
