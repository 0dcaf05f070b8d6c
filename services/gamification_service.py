"""
Gamification Service for the Exper gateway
Wraps the gamification service: player profiles, XP, streaks, achievements,
challenges, leaderboard, campaigns, quests and badges
"""

import logging

from services import quiz_grader
from utils.error_handler import NotFoundError

logger = logging.getLogger(__name__)

PERFECT_SCORE_ACHIEVEMENT_ID = 'perfect_score_achievement'
XP_PER_LEVEL = 500
STREAK_MILESTONE_DAYS = 7

class GamificationService:
    def __init__(self, client):
        self.client = client

    # ============= PLAYER =============

    def get_player_profile(self, user_id, username=None):
        """
        Get a player profile; passing the username creates it on first access
        """
        params = {'username': username} if username else None
        return self.client.get(f'/player/{user_id}', params=params)

    def get_user_profile(self, user_id):
        return self.client.get(f'/player/{user_id}/profile')

    def add_experience(self, user_id, amount, category=None):
        return self.client.post(f'/player/{user_id}/xp', json={'xp': amount, 'category': category})

    def update_streak(self, user_id, category=None):
        return self.client.post(f'/player/{user_id}/streak', json={'category': category})

    # ============= ACHIEVEMENTS =============

    def get_achievements(self):
        return self.client.get('/achievements') or []

    def get_player_achievements(self, user_id):
        return self.client.get(f'/player/{user_id}/achievements') or []

    def get_user_achievements(self, user_id):
        """
        Earned achievements as a list, whatever envelope the service answers with
        """
        data = self.get_player_achievements(user_id)
        if isinstance(data, dict):
            return data.get('achievements', [])
        return data

    def award_achievement(self, user_id, achievement_id):
        return self.client.post(
            f'/player/{user_id}/achievements',
            json={'achievement_id': achievement_id}
        )

    # ============= CHALLENGES =============

    def get_active_challenges(self):
        return self.client.get('/challenges') or []

    def complete_challenge(self, user_id, challenge_id):
        return self.client.post(f'/player/{user_id}/challenges/{challenge_id}')

    # ============= LEADERBOARD =============

    def get_leaderboard(self):
        return self.client.get('/leaderboard') or []

    # ============= CAMPAIGNS & QUESTS =============

    def get_campaigns(self, user_id):
        return self.client.get('/campaigns', params={'userId': user_id}) or []

    def get_user_active_campaign(self, user_id):
        try:
            return self.client.get(f'/player/{user_id}/campaign')
        except NotFoundError:
            return None

    def activate_campaign(self, user_id, campaign_id):
        result = self.client.post(f'/player/{user_id}/campaign/{campaign_id}/activate')
        logger.info(f"Activated campaign {campaign_id} for user {user_id}")
        return result

    def update_quest_progress(self, user_id, quest_id, objective_type, progress=1):
        return self.client.post(
            f'/player/{user_id}/quests/{quest_id}/progress',
            json={'objective_type': objective_type, 'progress': progress}
        )

    # ============= BADGES =============

    def get_user_badges(self, user_id):
        return self.client.get(f'/player/{user_id}/badges') or []

    # ============= QUIZ COMPLETION =============

    def record_quiz_completion(self, user_id, quiz, score, total):
        """
        Push the gamification side effects of a finished quiz.

        Each step is independent: a failing step is logged and leaves its part of
        the summary at the default, it never fails the quiz submission.
        """
        category = quiz.get('category')
        xp_gained = quiz_grader.calculate_xp(score, total, quiz.get('difficulty'))

        summary = {
            'xp_gained': xp_gained,
            'level_up': False,
            'level_progress': None,
            'current_streak': None,
            'streak_milestone': False,
            'achievement_awarded': None
        }

        try:
            xp_response = self.add_experience(user_id, xp_gained, category) or {}
            level = xp_response.get('level')
            if level is not None:
                summary['level_progress'] = self.level_progress(level, xp_response.get('xp', 0))
            summary['level_up'] = bool(xp_response.get('level_up'))
        except Exception as e:
            logger.error(f"Error adding experience for user {user_id}: {str(e)}")

        try:
            streak_response = self.update_streak(user_id, category) or {}
            current_streak = streak_response.get('current_streak')
            summary['current_streak'] = current_streak
            summary['streak_milestone'] = bool(current_streak) and current_streak % STREAK_MILESTONE_DAYS == 0
        except Exception as e:
            logger.error(f"Error updating streak for user {user_id}: {str(e)}")

        if quiz_grader.is_perfect(score, total):
            try:
                achievement_response = self.award_achievement(user_id, PERFECT_SCORE_ACHIEVEMENT_ID) or {}
                summary['achievement_awarded'] = PERFECT_SCORE_ACHIEVEMENT_ID
                if achievement_response.get('level_up'):
                    summary['level_up'] = True
                    new_level = achievement_response.get('new_level')
                    if new_level is not None:
                        xp = (summary['level_progress'] or {}).get('xp', 0)
                        summary['level_progress'] = self.level_progress(new_level, xp)
            except Exception as e:
                logger.error(f"Error awarding achievement to user {user_id}: {str(e)}")

        return summary

    @staticmethod
    def level_progress(level, xp):
        return {
            'current': level,
            'next': level + 1,
            'xp': xp,
            'required': (level + 1) * XP_PER_LEVEL
        }
