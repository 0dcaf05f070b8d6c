"""
Leaderboard Service for the Exper gateway
Ranks players from the gamification service by the chosen criteria
"""

from datetime import datetime
import logging

import pytz

from utils.error_handler import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_SORT = 'level'
MAX_LIMIT = 100

SORT_KEYS = {
    # null counters from the backend sort as 0
    'level': lambda p: (p.get('level') or 0, p.get('xp') or 0),
    'xp': lambda p: p.get('xp') or 0,
    'streak': lambda p: p.get('streakDays') or 0,
    'quizzes': lambda p: p.get('quizzesCompleted') or 0,
    'perfect': lambda p: p.get('quizzesPerfect') or 0,
    'achievements': lambda p: p.get('totalAchievements') or 0,
}

MEDALS = {
    1: 'gold',
    2: 'silver',
    3: 'bronze',
}

class LeaderboardService:
    def __init__(self, gamification_service):
        self.gamification_service = gamification_service

    def get_leaderboard(self, sort_by=DEFAULT_SORT, limit=50, current_user_id=None):
        """
        Get ranked leaderboard entries and the current user's position
        """
        if not isinstance(limit, int) or limit < 1:
            raise ValidationError("limit must be a positive integer", field='limit')
        limit = min(limit, MAX_LIMIT)

        if sort_by not in SORT_KEYS:
            logger.warning(f"Unknown leaderboard sort '{sort_by}', using {DEFAULT_SORT}")
            sort_by = DEFAULT_SORT

        try:
            players = self.gamification_service.get_leaderboard()
        except Exception as e:
            logger.error(f"Error fetching leaderboard: {str(e)}")
            raise

        ranked = self.rank_players(players, sort_by)

        current_user = None
        if current_user_id:
            for entry in ranked:
                if entry['user_id'] == current_user_id:
                    current_user = {'rank': entry['rank'], 'data': entry}
                    break

        entries = ranked[:limit]
        return {
            'sort_by': sort_by,
            'entries': entries,
            'current_user': current_user,
            'total_entries': len(entries),
            'total_players': len(ranked),
            'updated_at': datetime.now(pytz.utc).isoformat()
        }

    @staticmethod
    def rank_players(players, sort_by=DEFAULT_SORT):
        # sorted() is stable, so equal players keep the service's order
        ordered = sorted(players, key=SORT_KEYS.get(sort_by, SORT_KEYS[DEFAULT_SORT]), reverse=True)

        entries = []
        for rank, player in enumerate(ordered, 1):
            entries.append({
                'rank': rank,
                'medal': MEDALS.get(rank),
                'user_id': player.get('_id') or player.get('id'),
                'username': player.get('username', ''),
                'level': player.get('level') or 1,
                'xp': player.get('xp') or 0,
                'streak_days': player.get('streakDays') or 0,
                'quizzes_completed': player.get('quizzesCompleted') or 0,
                'quizzes_perfect': player.get('quizzesPerfect') or 0,
                'total_achievements': player.get('totalAchievements') or 0
            })
        return entries
