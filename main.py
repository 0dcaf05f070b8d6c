"""
Exper Gateway - Gamified Learning Backend-for-Frontend
Flask JSON API in front of the user, quiz, results and gamification services

Main entry point for the Flask API
"""

from flask import Flask, request, jsonify
from flask_cors import CORS
import logging

from config import Config
from services.auth_service import AuthService
from services.badge_service import BadgeService
from services.challenge_service import ChallengeService
from services.customization_service import CustomizationService
from services.gamification_service import GamificationService
from services.leaderboard_service import LeaderboardService
from services.notification_service import NotificationService
from services.quest_progress_manager import QuestProgressManager
from services.quiz_service import QuizService
from services.quiz_session import QuizSession
from services.results_service import ResultsService
from services.user_service import UserService
from utils.auth_middleware import require_auth, optional_auth, get_auth_token
from utils.error_handler import ValidationError, handle_error, validate_request_data, format_error_response
from utils.http_client import ServiceClient

# Configure logging
logging.basicConfig(level=getattr(logging, Config.LOG_LEVEL, logging.INFO))
logger = logging.getLogger(__name__)

# Initialize Flask app
app = Flask(__name__)

CORS(app, origins=Config.CORS_ORIGINS, supports_credentials=True)

# Initialize backend clients
user_client = ServiceClient(Config.USER_SERVICE_URL, 'user service', Config.REQUEST_TIMEOUT)
quiz_client = ServiceClient(Config.QUIZ_SERVICE_URL, 'quiz service', Config.REQUEST_TIMEOUT)
results_client = ServiceClient(Config.RESULTS_SERVICE_URL, 'results service', Config.REQUEST_TIMEOUT)
gamification_client = ServiceClient(Config.GAMIFICATION_SERVICE_URL, 'gamification service', Config.REQUEST_TIMEOUT)

# Initialize services
auth_service = AuthService(user_client)
quiz_service = QuizService(quiz_client)
results_service = ResultsService(results_client)
gamification_service = GamificationService(gamification_client)
customization_service = CustomizationService(gamification_client)
badge_service = BadgeService(gamification_service)
leaderboard_service = LeaderboardService(gamification_service)
challenge_service = ChallengeService(quiz_service, gamification_service)
quest_progress_manager = QuestProgressManager(gamification_service)
notification_service = NotificationService()
user_service = UserService(auth_service, gamification_service, results_service,
                           badge_service, customization_service)


def _json_body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _user_id_of(account):
    user = (account or {}).get('user') or account or {}
    return user.get('_id') or user.get('id')


# Health check endpoint
@app.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint"""
    return jsonify({
        'status': 'healthy',
        'service': 'exper-gateway',
        'version': '1.0.0'
    })

# ============= AUTH ENDPOINTS =============

@app.route('/auth/register', methods=['POST'])
def register():
    """Register a new user and create their player profile"""
    try:
        data = _json_body()
        result = auth_service.register(data)

        # Player profile creation is best-effort; it is also created on first access
        user_id = _user_id_of(result)
        if user_id:
            try:
                gamification_service.get_player_profile(user_id, username=data.get('username'))
                logger.info(f"Player profile created for user {user_id}")
            except Exception as e:
                logger.error(f"Error creating player profile: {str(e)}")
        else:
            logger.warning("User registration successful but no user ID available")

        return jsonify(result), 201
    except Exception as e:
        return handle_error(e)

@app.route('/auth/login', methods=['POST'])
def login():
    """Login user"""
    try:
        data = _json_body()
        result = auth_service.login(data.get('email'), data.get('password'))
        return jsonify(result)
    except Exception as e:
        return handle_error(e)

@app.route('/auth/preferences', methods=['GET'])
@require_auth
def get_preferences():
    """Get quiz preferences"""
    return jsonify(auth_service.get_preferences(token=get_auth_token()))

@app.route('/auth/preferences', methods=['PUT'])
@require_auth
def update_preferences():
    """Update quiz preferences"""
    try:
        result = auth_service.update_preferences(_json_body(), token=get_auth_token())
        return jsonify(result)
    except Exception as e:
        return handle_error(e)

# ============= USER ENDPOINTS =============

@app.route('/users/<user_id>', methods=['GET'])
@optional_auth
def get_user_profile(user_id):
    """Get user profile with player stats, badges and customization"""
    try:
        profile = user_service.get_profile(user_id, token=get_auth_token())
        return jsonify(profile)
    except Exception as e:
        return handle_error(e)

@app.route('/users/<user_id>/stats', methods=['GET'])
def get_user_stats(user_id):
    """Get quiz history statistics"""
    try:
        return jsonify(user_service.get_stats(user_id))
    except Exception as e:
        return handle_error(e)

# ============= QUIZ ENDPOINTS =============

@app.route('/quizzes', methods=['GET'])
def get_quizzes():
    """Get all quizzes"""
    try:
        quizzes = quiz_service.list_quizzes(category=request.args.get('category'))
        return jsonify({'quizzes': quizzes})
    except Exception as e:
        return handle_error(e)

@app.route('/quizzes/mine', methods=['GET'])
@require_auth
def get_user_quizzes():
    """Get quizzes created by a user"""
    try:
        user_id = request.args.get('userId')
        if not user_id:
            raise ValidationError('userId required', field='userId')
        quizzes = quiz_service.list_quizzes(user_id=user_id)
        return jsonify({'quizzes': quizzes})
    except Exception as e:
        return handle_error(e)

@app.route('/quiz/<quiz_id>', methods=['GET'])
def get_quiz(quiz_id):
    """Get specific quiz by ID"""
    try:
        return jsonify(quiz_service.get_quiz(quiz_id))
    except Exception as e:
        return handle_error(e)

@app.route('/quiz', methods=['POST'])
@require_auth
def create_quiz():
    """Create a quiz and count it towards quest objectives"""
    try:
        data = _json_body()
        validate_request_data(data, ['title', 'questions', 'userId'])

        quiz = quiz_service.create_quiz(data, data['userId'], token=get_auth_token())

        progress = quest_progress_manager.track_quiz_creation(data['userId'], bool(data.get('useAI')))
        notification_service.notify_quest_progress(data['userId'], progress)

        return jsonify({'quiz': quiz, 'quest_progress': progress}), 201
    except Exception as e:
        return handle_error(e)

@app.route('/quiz/<quiz_id>', methods=['PUT'])
@require_auth
def update_quiz(quiz_id):
    """Edit a quiz"""
    try:
        data = _json_body()
        result = quiz_service.update_quiz(quiz_id, data, data.get('userId'), token=get_auth_token())
        return jsonify(result)
    except Exception as e:
        return handle_error(e)

@app.route('/quiz/<quiz_id>/submit', methods=['POST'])
@require_auth
def submit_quiz(quiz_id):
    """Grade a quiz attempt, store it and apply the gamification side effects"""
    try:
        data = _json_body()
        validate_request_data(data, ['userId', 'answers'], {'answers': list, 'questionAttempts': list})
        user_id = data['userId']

        quiz = quiz_service.get_quiz(quiz_id)
        session = QuizSession.from_submission(quiz, data['answers'], data.get('questionAttempts'))
        results = session.results()

        result_saved = True
        try:
            results_service.submit_result({
                'userId': user_id,
                'quizId': quiz.get('_id', quiz_id),
                'score': results['score'],
                'totalQuestions': results['totalQuestions'],
                'questionAttempts': results['questionAttempts'],
                'category': quiz.get('category')
            }, token=get_auth_token())
        except Exception as e:
            logger.error(f"Error saving result: {str(e)}")
            result_saved = False

        gamification = gamification_service.record_quiz_completion(
            user_id, quiz, results['score'], results['totalQuestions']
        )
        notification_service.notify_quiz_gamification(user_id, gamification)

        progress = quest_progress_manager.track_quiz_completion(
            user_id, results['score'], results['totalQuestions'], quiz.get('category')
        )
        notification_service.notify_quest_progress(user_id, progress)

        streak_progress = None
        if gamification.get('current_streak'):
            streak_progress = quest_progress_manager.track_streak(user_id, gamification['current_streak'])
            notification_service.notify_quest_progress(user_id, streak_progress)

        return jsonify({
            **results,
            'result_saved': result_saved,
            'gamification': gamification,
            'quest_progress': progress,
            'streak_progress': streak_progress
        })
    except Exception as e:
        return handle_error(e)

@app.route('/categories', methods=['GET'])
def get_categories():
    """Get quiz categories"""
    try:
        return jsonify({'categories': quiz_service.get_categories()})
    except Exception as e:
        return handle_error(e)

@app.route('/categories', methods=['POST'])
@require_auth
def add_category():
    """Add a quiz category"""
    try:
        name = quiz_service.add_category(_json_body().get('name'))
        return jsonify({'name': name}), 201
    except Exception as e:
        return handle_error(e)

@app.route('/upload', methods=['POST'])
@require_auth
def upload_image():
    """Upload a question image"""
    try:
        file = request.files.get('image')
        if not file:
            raise ValidationError('Image file required', field='image')
        image_url = quiz_service.upload_image((file.filename, file.stream, file.mimetype))
        return jsonify({'imageUrl': image_url})
    except Exception as e:
        return handle_error(e)

@app.route('/upload-pdf', methods=['POST'])
@require_auth
def upload_pdf():
    """Upload a PDF to generate questions from"""
    try:
        file = request.files.get('pdf')
        if not file:
            raise ValidationError('PDF file required', field='pdf')
        pdf_url = quiz_service.upload_pdf((file.filename, file.stream, file.mimetype))
        return jsonify({'pdfUrl': pdf_url})
    except Exception as e:
        return handle_error(e)

@app.route('/generate-quiz', methods=['POST'])
@require_auth
def generate_quiz():
    """Generate quiz questions with an AI model"""
    try:
        data = _json_body()
        parameters = data.get('parameters', {})
        result = quiz_service.generate_quiz(
            notes=data.get('notes', ''),
            pdf_url=data.get('pdfUrl', ''),
            question_count=parameters.get('questionCount', 5),
            difficulty=parameters.get('difficulty', 'intermediate'),
            ai_model=data.get('aiModel', 'gpt')
        )
        return jsonify(result)
    except Exception as e:
        return handle_error(e)

@app.route('/validate-quiz', methods=['POST'])
@require_auth
def validate_quiz():
    """Validate quiz questions"""
    try:
        data = _json_body()
        validate_request_data(data, ['questions'], {'questions': list})
        validation = quiz_service.validate_quiz(
            data['questions'],
            data.get('parameters', {}).get('difficulty', 'intermediate')
        )
        return jsonify({'validation': validation})
    except Exception as e:
        return handle_error(e)

# ============= RESULTS ENDPOINTS =============

@app.route('/results/<user_id>', methods=['GET'])
def get_results(user_id):
    """Get a user's quiz results, optionally for one category"""
    try:
        category = request.args.get('category')
        if category:
            results = results_service.get_category_progress(user_id, category)
        else:
            results = results_service.get_user_results(user_id)
        return jsonify({'results': results})
    except Exception as e:
        return handle_error(e)

# ============= LEADERBOARD ENDPOINTS =============

@app.route('/leaderboard', methods=['GET'])
def get_leaderboard():
    """Get leaderboard data"""
    try:
        sort_by = request.args.get('sort', 'level')
        limit = int(request.args.get('limit', 50))

        leaderboard = leaderboard_service.get_leaderboard(
            sort_by=sort_by,
            limit=limit,
            current_user_id=request.args.get('userId')
        )
        return jsonify(leaderboard)
    except Exception as e:
        return handle_error(e)

# ============= PLAYER ENDPOINTS =============

@app.route('/player/<user_id>', methods=['GET'])
def get_player(user_id):
    """Get player profile"""
    try:
        return jsonify(gamification_service.get_player_profile(user_id))
    except Exception as e:
        return handle_error(e)

@app.route('/player/<user_id>/achievements', methods=['GET'])
def get_player_achievements(user_id):
    """Get a player's earned achievements"""
    try:
        return jsonify({'achievements': gamification_service.get_user_achievements(user_id)})
    except Exception as e:
        return handle_error(e)

@app.route('/achievements', methods=['GET'])
def get_achievements():
    """Get all achievements"""
    try:
        return jsonify({'achievements': gamification_service.get_achievements()})
    except Exception as e:
        return handle_error(e)

@app.route('/player/<user_id>/badges', methods=['GET'])
def get_player_badges(user_id):
    """Get a player's badges"""
    try:
        compact = request.args.get('compact', 'false').lower() == 'true'
        return jsonify(badge_service.get_user_badges(user_id, compact=compact))
    except Exception as e:
        return handle_error(e)

@app.route('/player/<user_id>/customization', methods=['GET'])
def get_customization(user_id):
    """Get profile customization"""
    return jsonify(customization_service.get_user_customization(user_id))

@app.route('/player/<user_id>/customization', methods=['POST'])
@require_auth
def save_customization(user_id):
    """Save profile customization"""
    try:
        return jsonify(customization_service.save_user_customization(user_id, _json_body()))
    except Exception as e:
        return handle_error(e)

# ============= CHALLENGE ENDPOINTS =============

@app.route('/challenges', methods=['GET'])
def get_challenges():
    """Get active challenges"""
    try:
        return jsonify({'challenges': challenge_service.get_active_challenges()})
    except Exception as e:
        return handle_error(e)

@app.route('/challenges/rotating', methods=['GET'])
def get_rotating_challenges():
    """Get the rotating challenge board"""
    try:
        user_id = request.args.get('userId')
        if not user_id:
            raise ValidationError('userId required', field='userId')
        return jsonify({'challenges': challenge_service.get_rotating_challenges(user_id)})
    except Exception as e:
        return handle_error(e)

@app.route('/player/<user_id>/challenges/<challenge_id>', methods=['POST'])
@require_auth
def complete_challenge(user_id, challenge_id):
    """Mark challenge as completed"""
    try:
        return jsonify(challenge_service.complete_challenge(user_id, challenge_id))
    except Exception as e:
        return handle_error(e)

# ============= CAMPAIGN ENDPOINTS =============

@app.route('/campaigns', methods=['GET'])
@require_auth
def get_campaigns():
    """Get available campaigns"""
    try:
        user_id = request.args.get('userId')
        if not user_id:
            raise ValidationError('userId required', field='userId')
        return jsonify({'campaigns': gamification_service.get_campaigns(user_id)})
    except Exception as e:
        return handle_error(e)

@app.route('/campaigns/active', methods=['GET'])
@require_auth
def get_active_campaign():
    """Get the user's active campaign"""
    try:
        user_id = request.args.get('userId')
        if not user_id:
            raise ValidationError('userId required', field='userId')
        return jsonify({'campaign': gamification_service.get_user_active_campaign(user_id)})
    except Exception as e:
        return handle_error(e)

@app.route('/campaigns/<campaign_id>/activate', methods=['POST'])
@require_auth
def activate_campaign(campaign_id):
    """Activate a campaign and return the refreshed active campaign"""
    try:
        data = _json_body()
        validate_request_data(data, ['userId'])
        result = gamification_service.activate_campaign(data['userId'], campaign_id)
        campaign = gamification_service.get_user_active_campaign(data['userId'])
        return jsonify({'result': result, 'campaign': campaign})
    except Exception as e:
        return handle_error(e)

@app.route('/quests/track', methods=['POST'])
@require_auth
def track_quest_action():
    """Track an action against the current quest"""
    try:
        data = _json_body()
        progress = quest_progress_manager.track_action(data)
        notification_service.notify_quest_progress(data.get('userId'), progress)
        return jsonify(progress)
    except Exception as e:
        return handle_error(e)

# ============= NOTIFICATION ENDPOINTS =============

@app.route('/notifications/<user_id>', methods=['GET'])
@require_auth
def get_notifications(user_id):
    """Drain pending gamification notifications"""
    return jsonify({
        'notifications': notification_service.drain(user_id),
        'last_progress': notification_service.last_progress(user_id)
    })

# Error handlers
@app.errorhandler(404)
def not_found(error):
    return jsonify(format_error_response('Endpoint not found', 'NOT_FOUND')), 404

@app.errorhandler(405)
def method_not_allowed(error):
    return jsonify(format_error_response('Method not allowed', 'METHOD_NOT_ALLOWED')), 405

@app.errorhandler(500)
def internal_error(error):
    logger.error(f"Internal server error: {str(error)}")
    return jsonify(format_error_response('Internal server error', 'INTERNAL_ERROR')), 500

# For local development
if __name__ == '__main__':
    app.run(debug=Config.ENVIRONMENT == 'development', host='0.0.0.0', port=Config.PORT)
