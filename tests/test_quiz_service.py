import pytest

from services.quiz_service import QuizService
from utils.error_handler import ServiceResponseError, ValidationError


def valid_question(**overrides):
    question = {
        'id': '1',
        'question': 'What is a Python decorator?',
        'options': ['A wrapper', 'A loop', 'A type', 'A module'],
        'correctAnswer': ['A wrapper'],
        'isMultiAnswer': False
    }
    question.update(overrides)
    return question


class TestQuizService:

    def test_list_quizzes_for_user(self, mock_client):
        mock_client.get.return_value = [{'_id': 'q1'}]

        result = QuizService(mock_client).list_quizzes(user_id='u1')

        assert result == [{'_id': 'q1'}]
        mock_client.get.assert_called_with('/quizzes', params={'userId': 'u1'})

    def test_list_quizzes_category_filter(self, mock_client):
        mock_client.get.return_value = [
            {'_id': 'q1', 'category': 'python'},
            {'_id': 'q2', 'category': 'sql'}
        ]

        result = QuizService(mock_client).list_quizzes(category='sql')

        assert [q['_id'] for q in result] == ['q2']

    def test_create_quiz_normalizes_payload(self, mock_client):
        mock_client.post.return_value = {'_id': 'new-quiz'}
        data = {
            'title': 'Decorators',
            'questions': [
                valid_question(),
                valid_question(id='2', isMultiAnswer=True, correctAnswer='A loop')
            ],
            'category': 'python',
            'useQuestionPool': False,
            'questionsPerAttempt': 3
        }

        result = QuizService(mock_client).create_quiz(data, 'user-1')

        assert result['_id'] == 'new-quiz'
        path = mock_client.post.call_args[0][0]
        payload = mock_client.post.call_args[1]['json']
        assert path == '/quiz'
        assert payload['questions'][0]['correctAnswer'] == 'A wrapper'
        assert payload['questions'][1]['correctAnswer'] == ['A loop']
        assert payload['userId'] == 'user-1'
        assert 'questionsPerAttempt' not in payload
        assert 'aiModel' not in payload

    def test_create_quiz_with_pool_and_ai(self, mock_client):
        mock_client.post.return_value = {'_id': 'new-quiz'}
        data = {
            'title': 'Generated',
            'questions': [valid_question()],
            'useQuestionPool': True,
            'questionsPerAttempt': 3,
            'useAI': True,
            'aiModel': 'claude'
        }

        QuizService(mock_client).create_quiz(data, 'user-1')

        payload = mock_client.post.call_args[1]['json']
        assert payload['questionsPerAttempt'] == 3
        assert payload['aiModel'] == 'claude'

    def test_create_quiz_requires_id_in_response(self, mock_client):
        mock_client.post.return_value = {'title': 'no id'}

        with pytest.raises(ServiceResponseError, match='No quiz ID'):
            QuizService(mock_client).create_quiz({'title': 'T', 'questions': [valid_question()]}, 'u1')

    def test_create_quiz_requires_questions(self, mock_client):
        with pytest.raises(ValidationError):
            QuizService(mock_client).create_quiz({'title': 'T', 'questions': []}, 'u1')
        mock_client.post.assert_not_called()

    @pytest.mark.parametrize('model,endpoint', [
        ('gpt', '/generate-quiz'),
        ('claude', '/generate-quiz-claude'),
        ('gemini', '/generate-quiz-gemini'),
    ])
    def test_generate_quiz_endpoint_by_model(self, mock_client, model, endpoint):
        mock_client.post.return_value = {'questions': [valid_question()]}

        result = QuizService(mock_client).generate_quiz(notes='decorators', ai_model=model)

        assert mock_client.post.call_args[0][0] == endpoint
        assert mock_client.post.call_args[1]['json']['parameters']['includeExplanations'] is True
        assert result['quality_rejected'] is False

    def test_generate_quiz_low_quality_is_rejected(self, mock_client):
        mock_client.post.return_value = {
            'questions': [valid_question()],
            'validation': {'score': 55, 'overall_feedback': 'Too vague.'}
        }

        result = QuizService(mock_client).generate_quiz()

        assert result['quality_rejected'] is True
        assert result['error'] == 'Quiz quality score (55/100) is too low. Too vague.'

    def test_generate_quiz_without_questions(self, mock_client):
        mock_client.post.return_value = {'message': 'ok'}

        with pytest.raises(ServiceResponseError, match='Invalid quiz data'):
            QuizService(mock_client).generate_quiz()

    def test_generate_quiz_unknown_model(self, mock_client):
        with pytest.raises(ValidationError):
            QuizService(mock_client).generate_quiz(ai_model='llama')

    def test_validate_quiz_local_issues_skip_backend(self, mock_client):
        questions = [valid_question(question='Short?', options=['a', ''], correctAnswer='')]

        result = QuizService(mock_client).validate_quiz(questions)

        assert result['score'] == 0
        assert result['overall_feedback'] == 'Please fix basic validation issues'
        assert result['feedback'][0]['issues'] == [
            'Question is too short',
            'Empty options detected',
            'No correct answer selected'
        ]
        mock_client.post.assert_not_called()

    def test_validate_quiz_multi_answer_needs_answers(self, mock_client):
        questions = [valid_question(isMultiAnswer=True, correctAnswer=[])]

        result = QuizService(mock_client).validate_quiz(questions)

        assert result['feedback'][0]['issues'] == ['No correct answers selected']

    def test_validate_quiz_calls_backend(self, mock_client):
        mock_client.post.return_value = {'validation': {'score': 88}}

        result = QuizService(mock_client).validate_quiz([valid_question()], 'expert')

        assert result == {'score': 88}
        payload = mock_client.post.call_args[1]['json']
        assert payload['parameters']['difficulty'] == 'expert'

    def test_add_category_requires_name(self, mock_client):
        with pytest.raises(ValidationError):
            QuizService(mock_client).add_category('  ')

    def test_upload_image_returns_url(self, mock_client):
        mock_client.post.return_value = {'imageUrl': 'http://img/1.png'}

        url = QuizService(mock_client).upload_image(('a.png', b'data', 'image/png'))

        assert url == 'http://img/1.png'
        assert mock_client.post.call_args[1]['files'] == {'image': ('a.png', b'data', 'image/png')}
