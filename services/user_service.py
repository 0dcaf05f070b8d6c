"""
User Service for the Exper gateway
Combines account, player, badge and customization data into profiles, and
summarises quiz history into stats
"""

import logging

logger = logging.getLogger(__name__)

DEFAULT_PLAYER = {
    'current_level': 1,
    'xp': 0,
    'next_level_xp': 500,
    'streaks': []
}

class UserService:
    def __init__(self, auth_service, gamification_service, results_service,
                 badge_service, customization_service):
        self.auth_service = auth_service
        self.gamification_service = gamification_service
        self.results_service = results_service
        self.badge_service = badge_service
        self.customization_service = customization_service

    def get_profile(self, user_id, token=None):
        """
        Get complete user profile; only the account itself is mandatory
        """
        user = self.auth_service.get_user(user_id, token=token)

        try:
            player = self.gamification_service.get_player_profile(user_id) or dict(DEFAULT_PLAYER)
        except Exception as e:
            logger.error(f"Error getting player profile for {user_id}: {str(e)}")
            player = dict(DEFAULT_PLAYER)

        try:
            badges = self.badge_service.get_user_badges(user_id, compact=True)['badges']
        except Exception as e:
            logger.error(f"Error getting badges for {user_id}: {str(e)}")
            badges = []

        customization = self.customization_service.get_user_customization(user_id)

        return {
            'user': user,
            'player': player,
            'level_progress': self.level_progress(player),
            'current_streak': self.current_streak(player),
            'badges': badges,
            'customization': customization
        }

    def get_stats(self, user_id):
        results = self.results_service.get_user_results(user_id)

        percentages = [r['percentage'] for r in results]
        by_category = {}
        for result in results:
            by_category.setdefault(result.get('category') or 'uncategorized', []).append(result['percentage'])

        timelines = self.results_service.group_by_quiz(results)

        return {
            'total_attempts': len(results),
            'average_percentage': round(sum(percentages) / len(percentages), 2) if percentages else 0,
            'best_percentage': max(percentages) if percentages else 0,
            'perfect_count': len([p for p in percentages if p >= 100]),
            'category_averages': {
                category: round(sum(values) / len(values), 2)
                for category, values in by_category.items()
            },
            'quiz_timelines': [
                {'quiz_id': quiz_id, 'results': entries}
                for quiz_id, entries in timelines.items()
            ]
        }

    @staticmethod
    def level_progress(player):
        current_level = player.get('current_level') or 1
        current_xp = player.get('xp') or 0
        next_level_xp = player.get('next_level_xp') or 0

        if next_level_xp > 0:
            progress_percentage = min(100, (current_xp / next_level_xp) * 100)
        else:
            progress_percentage = 100

        return {
            'current_level': current_level,
            'current_xp': current_xp,
            'xp_for_next_level': next_level_xp,
            'xp_needed_for_next': max(0, next_level_xp - current_xp),
            'progress_percentage': round(progress_percentage, 2)
        }

    @staticmethod
    def current_streak(player):
        streaks = player.get('streaks') or []
        if not streaks:
            return 0
        return streaks[0].get('current_streak', 0)
