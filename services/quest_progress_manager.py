"""
Quest Progress Manager for the Exper gateway

Maps learner actions onto objectives of the current quest in the learner's
active campaign and forwards the progress to the gamification service. The
gamification service owns quest state; this module only decides which quest
and which objective an action counts towards.
"""

from enum import Enum
import logging

logger = logging.getLogger(__name__)


class QuestActionType(str, Enum):
    COMPLETE_QUIZ = 'complete_quiz'
    COMPLETE_QUIZ_PERFECT = 'complete_quiz_perfect'
    COMPLETE_CATEGORY_QUIZ = 'complete_category_quiz'
    COMPLETE_CATEGORY_QUIZ_PERFECT = 'complete_category_quiz_perfect'
    CREATE_QUIZ = 'create_quiz'
    CREATE_AI_QUIZ = 'create_ai_quiz'
    START_STREAK = 'start_streak'
    MAINTAIN_STREAK = 'maintain_streak'


QUIZ_COMPLETION_ACTIONS = (QuestActionType.COMPLETE_QUIZ, QuestActionType.COMPLETE_QUIZ_PERFECT)


class QuestProgressManager:
    def __init__(self, gamification_service):
        self.gamification_service = gamification_service

    def track_action(self, data):
        """
        Track an action that might progress a quest objective.

        ``data`` holds ``userId``, ``actionType`` and optionally ``category``,
        ``score``, ``totalQuestions``, ``isPerfect``, ``progress`` and
        ``metadata``. Never raises; failures come back as ``success: False``.
        """
        try:
            user_id = data.get('userId')
            if not user_id:
                logger.error("Cannot track quest progress: User ID is undefined")
                return {'success': False, 'error': 'Missing user ID'}

            action_type = self.action_type(data.get('actionType'))
            if not action_type:
                return {'success': False, 'error': 'Missing action type'}

            category = data.get('category')
            progress = data.get('progress', 1)

            logger.info(f"Tracking action {action_type} for user {user_id}")

            campaign = self.gamification_service.get_user_active_campaign(user_id)
            if not campaign or not campaign.get('quests'):
                return {'success': False, 'message': 'No active campaign or quests'}

            quest = self.current_quest(campaign)
            if not quest:
                return {'success': False, 'message': 'No active quest found'}

            objective_type = self.objective_type(action_type, category, data.get('isPerfect', False))

            result = self.gamification_service.update_quest_progress(
                user_id,
                quest['id'],
                objective_type,
                progress
            ) or {}

            if result.get('quest_completed'):
                logger.info(f"Quest completed - User: {user_id}, Quest: {quest.get('title')}")

            return {
                'success': True,
                'questCompleted': result.get('quest_completed'),
                'objectivesCompleted': result.get('objectives_completed'),
                'questTitle': quest.get('title'),
                'rewards': result.get('rewards')
            }

        except Exception as e:
            logger.error(f"Error tracking quest progress: {str(e)}")
            return {'success': False, 'error': str(e) or 'Unknown error tracking progress'}

    def track_quiz_completion(self, user_id, score, total_questions, category=None):
        return self.track_action({
            'userId': user_id,
            'actionType': QuestActionType.COMPLETE_QUIZ,
            'category': category,
            'score': score,
            'totalQuestions': total_questions,
            'isPerfect': score == total_questions,
            'metadata': {'quizCompleted': True}
        })

    def track_quiz_creation(self, user_id, is_ai_generated):
        action = QuestActionType.CREATE_AI_QUIZ if is_ai_generated else QuestActionType.CREATE_QUIZ
        return self.track_action({'userId': user_id, 'actionType': action})

    def track_streak(self, user_id, current_streak):
        action = QuestActionType.START_STREAK if current_streak == 1 else QuestActionType.MAINTAIN_STREAK
        return self.track_action({'userId': user_id, 'actionType': action})

    @staticmethod
    def action_type(value):
        """
        Known actions become QuestActionType members; other action names (e.g.
        start_quest) are forwarded unchanged as objective types
        """
        if not value:
            return None
        try:
            return QuestActionType(value)
        except ValueError:
            return str(value)

    @staticmethod
    def current_quest(campaign):
        current_id = campaign.get('currentQuestId')
        for quest in campaign.get('quests', []):
            if not quest.get('completed') and quest.get('id') == current_id:
                return quest
        return None

    @staticmethod
    def objective_type(action_type, category=None, is_perfect=False):
        objective = action_type
        if is_perfect and action_type == QuestActionType.COMPLETE_QUIZ:
            objective = QuestActionType.COMPLETE_QUIZ_PERFECT

        if category and action_type in QUIZ_COMPLETION_ACTIONS:
            objective = (QuestActionType.COMPLETE_CATEGORY_QUIZ_PERFECT if is_perfect
                         else QuestActionType.COMPLETE_CATEGORY_QUIZ)
            return f"{objective.value}_{category}"

        return objective.value if isinstance(objective, QuestActionType) else objective
