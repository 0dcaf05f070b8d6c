"""
Quiz session state for the Exper gateway
Tracks answers, per-question timing and navigation through a quiz attempt

Drive a QuizSession with answer/next/previous for an interactive attempt, or
build one with QuizSession.from_submission when all answers arrive at once.
"""

from datetime import datetime

from services import quiz_grader
from utils.error_handler import ValidationError


class QuizSession:
    def __init__(self, quiz, clock=None):
        self.quiz = quiz
        self.questions = quiz.get('questions', [])
        self._clock = clock or datetime.now
        self.reset()

    def reset(self):
        self.current_question = 0
        self.selected_answers = [''] * len(self.questions)
        self.attempts = []
        self.visited = set()
        self.finished = False
        self.start_time = self._clock()

    def answer(self, question_index, option):
        """
        Select an option; multi-answer questions toggle it in the selection
        """
        if not 0 <= question_index < len(self.questions):
            raise IndexError(f"No question at index {question_index}")

        question = self.questions[question_index]
        if question.get('isMultiAnswer'):
            current = self.selected_answers[question_index]
            current = list(current) if isinstance(current, list) else []
            if option in current:
                current.remove(option)
            else:
                current.append(option)
            self.selected_answers[question_index] = current
        else:
            self.selected_answers[question_index] = option

    def is_answer_correct(self, question_index):
        return quiz_grader.is_answer_correct(
            self.questions[question_index],
            self.selected_answers[question_index]
        )

    def next(self):
        """
        Leave the current question; returns the results once the last one is left
        """
        if not self.questions:
            self.finished = True
            return self.results()

        now = self._clock()
        if self.current_question not in self.visited:
            self.attempts.append({
                'questionIndex': self.current_question,
                'timeSpent': (now - self.start_time).total_seconds(),
                'isCorrect': self.is_answer_correct(self.current_question)
            })
            self.visited.add(self.current_question)

        self.start_time = now

        if self.current_question < len(self.questions) - 1:
            self.current_question += 1
            return None

        self.finished = True
        return self.results()

    def previous(self):
        if self.current_question > 0:
            self.current_question -= 1

    def results(self):
        total = len(self.questions)
        score = quiz_grader.grade_quiz(self.quiz, self.selected_answers)
        return {
            'score': score,
            'totalQuestions': total,
            'percentage': quiz_grader.percentage(score, total),
            'experienceGained': quiz_grader.calculate_xp(score, total, self.quiz.get('difficulty')),
            'achievements': quiz_grader.local_achievements(score, total),
            'outcome': quiz_grader.classify_outcome(score, total),
            'celebration': quiz_grader.celebration_for(score, total),
            'questionAttempts': list(self.attempts),
            'question_types': self.question_types(),
            'average_time': self.average_time()
        }

    def question_types(self):
        """
        Totals and correct answers for single and multi-answer questions
        """
        breakdown = {'single': {'total': 0, 'correct': 0}, 'multi': {'total': 0, 'correct': 0}}
        for index, question in enumerate(self.questions):
            kind = breakdown['multi' if question.get('isMultiAnswer') else 'single']
            kind['total'] += 1
            if self.is_answer_correct(index):
                kind['correct'] += 1
        return breakdown

    def average_time(self):
        times = [a.get('timeSpent') or 0 for a in self.attempts]
        times = [t for t in times if isinstance(t, (int, float))]
        return round(sum(times) / len(times), 2) if times else 0

    @classmethod
    def from_submission(cls, quiz, answers, attempts=None):
        """
        Rebuild a finished session from answers submitted in one request
        """
        session = cls(quiz)
        for index, answer in enumerate(answers[:len(session.questions)]):
            session.selected_answers[index] = answer
        session.attempts = list(attempts or [])
        if not all(isinstance(a, dict) for a in session.attempts):
            raise ValidationError("Each question attempt must be an object", field='questionAttempts')
        session.visited = {a.get('questionIndex') for a in session.attempts
                           if isinstance(a.get('questionIndex'), int)}
        session.current_question = max(len(session.questions) - 1, 0)
        session.finished = True
        return session
