"""
Quiz Service for the Exper gateway
Wraps the quiz service: listing, editing, categories, uploads, AI generation and validation
"""

import logging

from utils.error_handler import ValidationError, ServiceResponseError

logger = logging.getLogger(__name__)

DIFFICULTIES = ('beginner', 'intermediate', 'expert')
AI_MODELS = ('gpt', 'claude', 'gemini')

GENERATION_ENDPOINTS = {
    'gpt': '/generate-quiz',
    'claude': '/generate-quiz-claude',
    'gemini': '/generate-quiz-gemini',
}

MIN_QUALITY_SCORE = 70
MIN_QUESTION_LENGTH = 10

class QuizService:
    def __init__(self, client):
        self.client = client

    def list_quizzes(self, user_id=None, category=None):
        """
        Get quizzes, optionally only those created by a user or in one category
        """
        try:
            params = {'userId': user_id} if user_id else None
            quizzes = self.client.get('/quizzes', params=params) or []
        except Exception as e:
            logger.error(f"Error fetching quizzes: {str(e)}")
            raise

        if category:
            quizzes = [q for q in quizzes if q.get('category') == category]
        return quizzes

    def get_quiz(self, quiz_id):
        try:
            return self.client.get(f'/quiz/{quiz_id}')
        except Exception as e:
            logger.error(f"Error fetching quiz {quiz_id}: {str(e)}")
            raise

    def create_quiz(self, data, user_id, token=None):
        """
        Create a quiz; returns the stored quiz which must carry an _id
        """
        if not data or not data.get('title'):
            raise ValidationError("Quiz title required", field='title')
        if not data.get('questions'):
            raise ValidationError("Quiz must have at least one question", field='questions')

        quiz_data = {
            'title': data['title'],
            'description': data.get('description', ''),
            'questions': self.normalize_questions(data['questions']),
            'category': data.get('category', ''),
            'userId': user_id,
            'randomizeQuestions': bool(data.get('randomizeQuestions', False)),
            'useQuestionPool': bool(data.get('useQuestionPool', False))
        }
        if data.get('difficulty'):
            quiz_data['difficulty'] = data['difficulty']
        if data.get('useAI'):
            quiz_data['aiModel'] = data.get('aiModel', 'gpt')
        if quiz_data['useQuestionPool']:
            quiz_data['questionsPerAttempt'] = data.get('questionsPerAttempt', 5)

        try:
            result = self.client.post('/quiz', json=quiz_data, token=token)
        except Exception as e:
            logger.error(f"Error creating quiz: {str(e)}")
            raise

        if not result or not result.get('_id'):
            raise ServiceResponseError("No quiz ID returned from server", service_name='quiz service')

        logger.info(f"Created quiz {result['_id']}: {quiz_data['title']} by user {user_id}")
        return result

    def update_quiz(self, quiz_id, data, user_id, token=None):
        if not data or not data.get('title'):
            raise ValidationError("Quiz title required", field='title')

        quiz_data = {
            'title': data['title'],
            'description': data.get('description', ''),
            'questions': self.normalize_questions(data.get('questions', [])),
            'userId': user_id
        }

        try:
            result = self.client.put(f'/quiz/{quiz_id}', json=quiz_data, token=token)
            logger.info(f"Updated quiz {quiz_id}")
            return result
        except Exception as e:
            logger.error(f"Error updating quiz {quiz_id}: {str(e)}")
            raise

    def get_categories(self):
        return self.client.get('/categories') or []

    def add_category(self, name):
        name = (name or '').strip()
        if not name:
            raise ValidationError("Category name required", field='name')

        try:
            self.client.post('/categories', json={'name': name})
            logger.info(f"Added category: {name}")
            return name
        except Exception as e:
            logger.error(f"Error adding category: {str(e)}")
            raise

    def upload_image(self, file):
        result = self.client.post('/upload', files={'image': file}) or {}
        if not result.get('imageUrl'):
            raise ServiceResponseError("Failed to upload image", service_name='quiz service')
        return result['imageUrl']

    def upload_pdf(self, file):
        result = self.client.post('/upload-pdf', files={'pdf': file}) or {}
        if not result.get('pdfUrl'):
            raise ServiceResponseError("Failed to upload PDF", service_name='quiz service')
        return result['pdfUrl']

    def generate_quiz(self, notes='', pdf_url='', question_count=5, difficulty='intermediate', ai_model='gpt'):
        """
        Generate questions with the chosen AI model.

        Returns the generated questions together with the quality validation; a
        validation score under MIN_QUALITY_SCORE marks the result as rejected so
        the caller can show the feedback instead of a preview.
        """
        if ai_model not in AI_MODELS:
            raise ValidationError(f"Unknown AI model: {ai_model}", field='aiModel')
        if difficulty not in DIFFICULTIES:
            raise ValidationError(f"Invalid difficulty: {difficulty}", field='difficulty')

        payload = {
            'notes': notes,
            'pdfUrl': pdf_url,
            'parameters': {
                'questionCount': question_count,
                'difficulty': difficulty,
                'includeExplanations': True
            }
        }

        try:
            data = self.client.post(GENERATION_ENDPOINTS[ai_model], json=payload)
        except Exception as e:
            logger.error(f"Quiz generation error ({ai_model}): {str(e)}")
            raise

        if not data or not data.get('questions'):
            raise ServiceResponseError("Invalid quiz data received", service_name='quiz service')

        validation = data.get('validation')
        rejected = bool(validation) and validation.get('score', 0) < MIN_QUALITY_SCORE

        result = {
            'questions': data['questions'],
            'validation': validation,
            'quality_rejected': rejected
        }
        if rejected:
            result['error'] = (
                f"Quiz quality score ({validation.get('score')}/100) is too low. "
                f"{validation.get('overall_feedback', '')}"
            ).strip()
        return result

    def validate_quiz(self, questions, difficulty='intermediate'):
        """
        Run the local checks, then ask the quiz service for a quality review
        """
        basic_validation = [self._basic_question_check(q) for q in questions]

        if any(v['issues'] for v in basic_validation):
            return {
                'score': 0,
                'feedback': basic_validation,
                'overall_feedback': 'Please fix basic validation issues',
                'difficulty_alignment': 0
            }

        try:
            data = self.client.post('/validate-quiz', json={
                'questions': questions,
                'parameters': {
                    'difficulty': difficulty,
                    'includeExplanations': True
                }
            }) or {}
        except Exception as e:
            logger.error(f"Error validating quiz: {str(e)}")
            raise

        return data.get('validation')

    @staticmethod
    def normalize_questions(questions):
        """
        Single-answer questions carry a string answer, multi-answer questions a list
        """
        normalized = []
        for question in questions:
            answer = question.get('correctAnswer')
            if question.get('isMultiAnswer'):
                if answer is None or answer == '':
                    answer = []
                elif not isinstance(answer, list):
                    answer = [answer]
            elif isinstance(answer, list):
                answer = answer[0] if answer else ''

            normalized.append({**question, 'correctAnswer': answer})
        return normalized

    @staticmethod
    def _basic_question_check(question):
        issues = []
        suggestions = []

        if len(question.get('question', '')) < MIN_QUESTION_LENGTH:
            issues.append("Question is too short")
            suggestions.append("Make question more detailed (at least 10 characters)")

        if any(len(option) == 0 for option in question.get('options', [])):
            issues.append("Empty options detected")
            suggestions.append("Fill in all options")

        answer = question.get('correctAnswer')
        if question.get('isMultiAnswer'):
            if not isinstance(answer, list) or len(answer) == 0:
                issues.append("No correct answers selected")
                suggestions.append("Select at least one correct answer")
        elif not answer:
            issues.append("No correct answer selected")
            suggestions.append("Select a correct answer")

        return {
            'question_id': question.get('id'),
            'score': 100 if not issues else 50,
            'difficulty_rating': 'appropriate',
            'issues': issues,
            'suggestions': suggestions
        }
