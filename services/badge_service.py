"""
Badge Service for the Exper gateway
Groups a user's badges for profile display
"""

import logging

logger = logging.getLogger(__name__)

COMPACT_BADGE_COUNT = 5

class BadgeService:
    def __init__(self, gamification_service):
        self.gamification_service = gamification_service

    def get_user_badges(self, user_id, compact=False):
        """
        Get user's earned badges along with available badges
        """
        try:
            badges = self.gamification_service.get_user_badges(user_id)
        except Exception as e:
            logger.error(f"Error fetching badges for user {user_id}: {str(e)}")
            raise

        earned = [b for b in badges if b.get('earned')]

        if compact:
            return {'badges': earned[:COMPACT_BADGE_COUNT], 'earned_count': len(earned)}

        return {
            'all_badges': badges,
            'earned_badges': earned,
            'available_badges': [b for b in badges if not b.get('earned')],
            'categories': self.categories(badges),
            'by_category': self.group_by_category(badges),
            'total_badges': len(badges),
            'earned_count': len(earned)
        }

    @staticmethod
    def categories(badges):
        """
        Unique categories in first-seen order
        """
        seen = []
        for badge in badges:
            category = badge.get('category')
            if category not in seen:
                seen.append(category)
        return seen

    @classmethod
    def group_by_category(cls, badges):
        groups = {category: [] for category in cls.categories(badges)}
        for badge in badges:
            groups[badge.get('category')].append(badge)
        return groups
