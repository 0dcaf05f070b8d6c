"""
Challenge Service for the Exper gateway
Builds the rotating challenge board from quizzes, achievements and categories
"""

import copy
import logging
import random

logger = logging.getLogger(__name__)

CHALLENGES_PER_SOURCE = 4
QUIZ_CHALLENGE_XP = 75
ACHIEVEMENT_CHALLENGE_XP = 100
CATEGORY_CHALLENGE_XP = 50

FALLBACK_CHALLENGES = [
    {
        'id': 'daily-quiz',
        'type': 'DAILY QUIZ',
        'title': 'Featured Quiz',
        'description': "Test your knowledge with today's featured quiz!",
        'xpReward': QUIZ_CHALLENGE_XP,
        'action': '/quiz/quizzes',
        'category': 'quiz'
    },
    {
        'id': 'achievement-hunt',
        'type': 'ACHIEVEMENT HUNT',
        'title': 'Perfect Streak',
        'description': 'Complete 3 quizzes with a perfect score to unlock this achievement!',
        'xpReward': ACHIEVEMENT_CHALLENGE_XP,
        'action': '/achievements',
        'category': 'achievement'
    },
    {
        'id': 'category-challenge',
        'type': 'CATEGORY CHALLENGE',
        'title': 'Explore Categories',
        'description': 'Complete any quiz in a new category for bonus XP!',
        'xpReward': CATEGORY_CHALLENGE_XP,
        'action': '/quiz/quizzes',
        'category': 'category'
    },
]

class ChallengeService:
    def __init__(self, quiz_service, gamification_service, rng=None):
        self.quiz_service = quiz_service
        self.gamification_service = gamification_service
        self.rng = rng or random.Random()

    def get_active_challenges(self):
        return self.gamification_service.get_active_challenges()

    def get_rotating_challenges(self, user_id):
        """
        Mix of quiz, achievement and category challenges in random order.
        A source that cannot be fetched contributes nothing; when none can be
        fetched the fixed fallback board is returned.
        """
        quizzes = self._safe_fetch('quizzes', self.quiz_service.list_quizzes)
        achievements = self._safe_fetch('achievements', self.gamification_service.get_achievements)
        categories = self._safe_fetch('categories', self.quiz_service.get_categories)

        if quizzes is None and achievements is None and categories is None:
            logger.warning(f"No challenge sources available for user {user_id}, using fallback challenges")
            return copy.deepcopy(FALLBACK_CHALLENGES)

        challenges = (
            self._quiz_challenges(quizzes or [])
            + self._achievement_challenges(achievements or [], user_id)
            + self._category_challenges(categories or [])
        )
        self.rng.shuffle(challenges)
        return challenges

    def complete_challenge(self, user_id, challenge_id):
        try:
            result = self.gamification_service.complete_challenge(user_id, challenge_id)
            logger.info(f"Challenge {challenge_id} completed by user {user_id}")
            return result
        except Exception as e:
            logger.error(f"Error completing challenge {challenge_id}: {str(e)}")
            raise

    def _safe_fetch(self, name, fetch):
        try:
            return fetch() or []
        except Exception as e:
            logger.error(f"Error fetching {name} for challenges: {str(e)}")
            return None

    @staticmethod
    def _quiz_challenges(quizzes):
        return [{
            'id': f"quiz-{quiz.get('_id')}",
            'type': 'DAILY QUIZ',
            'title': quiz.get('title'),
            'description': quiz.get('description') or
                f"Test your knowledge with this {quiz.get('category') or 'featured'} quiz!",
            'xpReward': QUIZ_CHALLENGE_XP,
            'action': f"/quiz/{quiz.get('_id')}",
            'category': 'quiz'
        } for quiz in quizzes[:CHALLENGES_PER_SOURCE]]

    @staticmethod
    def _achievement_challenges(achievements, user_id):
        unearned = [a for a in achievements if not a.get('earned')]
        return [{
            'id': f"achievement-{achievement.get('_id')}",
            'type': 'ACHIEVEMENT HUNT',
            'title': achievement.get('title'),
            'description': achievement.get('description'),
            'xpReward': achievement.get('xp_reward') or ACHIEVEMENT_CHALLENGE_XP,
            'icon': achievement.get('icon'),
            'action': f"/user/{user_id}",
            'category': 'achievement'
        } for achievement in unearned[:CHALLENGES_PER_SOURCE]]

    @staticmethod
    def _category_challenges(categories):
        return [{
            'id': f"category-{category}",
            'type': 'CATEGORY CHALLENGE',
            'title': f"{category} Mastery",
            'description': f"Complete any quiz in the {category} category for bonus XP!",
            'xpReward': CATEGORY_CHALLENGE_XP,
            'action': f"/quiz/quizzes?category={category}",
            'category': 'category'
        } for category in categories[:CHALLENGES_PER_SOURCE]]
