"""
Notification Service for the Exper gateway
Per-user queue of gamification notifications (quest progress, achievements,
level ups, streaks) waiting to be shown
"""

from collections import defaultdict, deque
from datetime import datetime
import logging
import threading

import pytz

logger = logging.getLogger(__name__)

NOTIFICATION_KINDS = ('quest_progress', 'quest_completed', 'achievement', 'level_up', 'streak')
MAX_PENDING = 50

class NotificationService:
    def __init__(self, max_pending=MAX_PENDING):
        self._lock = threading.Lock()
        self._pending = defaultdict(lambda: deque(maxlen=max_pending))
        self._last_progress = {}

    def push(self, user_id, kind, payload):
        if kind not in NOTIFICATION_KINDS:
            raise ValueError(f"Unknown notification kind: {kind}")

        notification = {
            'kind': kind,
            'payload': payload,
            'created_at': datetime.now(pytz.utc).isoformat()
        }
        with self._lock:
            self._pending[user_id].append(notification)
        return notification

    def notify_quest_progress(self, user_id, result):
        """
        Remember the latest successful quest progress and queue a notification for it
        """
        if not result or not result.get('success'):
            return None

        with self._lock:
            self._last_progress[user_id] = result

        kind = 'quest_completed' if result.get('questCompleted') else 'quest_progress'
        return self.push(user_id, kind, result)

    def notify_quiz_gamification(self, user_id, summary):
        """
        Queue the notifications a finished quiz earned
        """
        if summary.get('level_up') and summary.get('level_progress'):
            self.push(user_id, 'level_up', summary['level_progress'])
        if summary.get('streak_milestone'):
            self.push(user_id, 'streak', {'current_streak': summary.get('current_streak')})
        if summary.get('achievement_awarded'):
            self.push(user_id, 'achievement', {'achievement_id': summary['achievement_awarded']})

    def last_progress(self, user_id):
        with self._lock:
            return self._last_progress.get(user_id)

    def drain(self, user_id):
        with self._lock:
            pending = self._pending.pop(user_id, None)
        return list(pending) if pending else []
