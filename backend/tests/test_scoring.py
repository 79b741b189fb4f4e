import random

from buzzer.services.party.codes import generate_party_code, player_id_for
from buzzer.services.party.scoring import compute_points, question_length


def test_incorrect_answer_costs_five_regardless_of_timing():
    assert compute_points(False, 0, 100) == -5
    assert compute_points(False, 99, 100) == -5


def test_correct_answer_in_first_half_scores_fifteen():
    assert compute_points(True, 40, 100) == 15
    assert compute_points(True, 0, 100) == 15


def test_correct_answer_at_or_after_half_scores_ten():
    assert compute_points(True, 50, 100) == 10
    assert compute_points(True, 150, 100) == 10


def test_zero_length_question_does_not_divide_by_zero():
    assert compute_points(True, 0, 0) == 15
    assert compute_points(True, 1, 0) == 10


def test_question_length_reads_prompt_text():
    assert question_length({'question': 'x' * 42, 'answer': 'y'}) == 42
    assert question_length('abcd') == 4
    assert question_length({'answer': 'no prompt'}) == 1
    assert question_length(None) == 1


class _SequenceRng:
    def __init__(self, values):
        self.values = list(values)

    def randint(self, lo, hi):
        return self.values.pop(0)


def test_party_code_regenerates_on_collision():
    taken = {'1234'}
    code = generate_party_code(taken.__contains__, _SequenceRng([1234, 1234, 5678]))
    assert code == '5678'


def test_party_codes_are_four_digits():
    rng = random.Random(0)
    for _ in range(200):
        code = generate_party_code(lambda c: False, rng)
        assert len(code) == 4 and code.isdigit()


def test_player_id_is_connection_id():
    assert player_id_for('sid-1') == 'sid-1'
