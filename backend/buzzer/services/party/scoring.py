INCORRECT_POINTS = -5
FAST_CORRECT_POINTS = 15
CORRECT_POINTS = 10
FAST_BUZZ_RATIO = 0.5


def question_length(question) -> int:
    """Character length of a question's prompt text.

    Questions are opaque apart from their prompt: either a mapping with a
    ``question`` string or a bare string. Anything else counts as length 1.
    """
    if isinstance(question, str):
        return len(question)
    if isinstance(question, dict) and isinstance(question.get('question'), str):
        return len(question['question'])
    return 1


def compute_points(is_correct: bool, buzz_point: int, length: int) -> int:
    """Points for an answer.

    -5 for a wrong answer; a right answer is worth 15 when the buzz came in
    the first half of the prompt, 10 otherwise.
    """
    if not is_correct:
        return INCORRECT_POINTS
    if (buzz_point or 0) / max(1, length) < FAST_BUZZ_RATIO:
        return FAST_CORRECT_POINTS
    return CORRECT_POINTS
