"""
Quiz grading for the Exper gateway
Client-side scoring, XP estimation and result classification
"""

import math

BASE_XP = 100
ACCURACY_BONUS_XP = 50

DIFFICULTY_MULTIPLIERS = {
    'expert': 2.5,
    'intermediate': 1.5,
}

PERFECT_SCORE_ACHIEVEMENT = {
    'title': 'Perfect Score!',
    'description': 'Answer all questions correctly',
    'icon': '🏆'
}

QUIZ_MASTER_ACHIEVEMENT = {
    'title': 'Quiz Master',
    'description': 'Score 80% or higher',
    'icon': '🎯'
}


def _as_list(value):
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def is_answer_correct(question, selected):
    """
    Multi-answer questions need exactly the correct set; single-answer questions need equality
    """
    correct = question.get('correctAnswer')

    if question.get('isMultiAnswer'):
        correct_answers = _as_list(correct)
        return (
            isinstance(selected, (list, tuple))
            and len(correct_answers) == len(selected)
            and all(answer in selected for answer in correct_answers)
        )

    # Single-answer questions created through the form store the answer as a one-element list
    if isinstance(correct, (list, tuple)) and len(correct) == 1:
        correct = correct[0]
    return selected == correct


def grade_quiz(quiz, selected_answers):
    questions = quiz.get('questions', [])
    score = 0
    for index, question in enumerate(questions):
        selected = selected_answers[index] if index < len(selected_answers) else ''
        if is_answer_correct(question, selected):
            score += 1
    return score


def percentage(score, total):
    if not total:
        return 0.0
    return round(score / total * 100, 2)


def calculate_xp(score, total, difficulty=None):
    multiplier = DIFFICULTY_MULTIPLIERS.get(difficulty, 1)
    accuracy_bonus = (score / total) * ACCURACY_BONUS_XP if total else 0
    # Halves round up
    return int(math.floor((BASE_XP + accuracy_bonus) * multiplier + 0.5))


def local_achievements(score, total):
    achievements = []
    if total and score == total:
        achievements.append(dict(PERFECT_SCORE_ACHIEVEMENT))
    if total and score >= total * 0.8:
        achievements.append(dict(QUIZ_MASTER_ACHIEVEMENT))
    return achievements


def classify_outcome(score, total, win_threshold=70, loss_threshold=40):
    pct = percentage(score, total)
    if pct >= win_threshold:
        return 'win'
    if pct < loss_threshold:
        return 'loss'
    return 'neutral'


def celebration_for(score, total):
    if not total:
        return None
    if score == total:
        return 'perfect'
    if score >= total * 0.75:
        return 'good'
    return None


def is_perfect(score, total):
    return bool(total) and score == total
