import pytest

from services.notification_service import NotificationService


class TestNotificationService:

    def test_push_and_drain(self):
        service = NotificationService()
        service.push('u1', 'achievement', {'achievement_id': 'a1'})

        pending = service.drain('u1')

        assert len(pending) == 1
        assert pending[0]['kind'] == 'achievement'
        assert pending[0]['created_at'].endswith('+00:00')
        assert service.drain('u1') == []

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            NotificationService().push('u1', 'confetti', {})

    def test_queue_is_bounded(self):
        """Test only the newest notifications are kept"""
        service = NotificationService(max_pending=2)
        for streak in range(3):
            service.push('u1', 'streak', {'current_streak': streak})

        pending = service.drain('u1')

        assert [n['payload']['current_streak'] for n in pending] == [1, 2]

    def test_quest_progress_only_on_success(self):
        service = NotificationService()

        assert service.notify_quest_progress('u1', {'success': False}) is None
        assert service.last_progress('u1') is None

        result = {'success': True, 'questCompleted': True, 'questTitle': 'List Master'}
        notification = service.notify_quest_progress('u1', result)

        assert notification['kind'] == 'quest_completed'
        assert service.last_progress('u1') == result

    def test_quiz_gamification_notifications(self):
        """Test a finished quiz queues level up, streak and achievement notices"""
        service = NotificationService()
        service.notify_quiz_gamification('u1', {
            'level_up': True,
            'level_progress': {'current': 3},
            'streak_milestone': True,
            'current_streak': 14,
            'achievement_awarded': 'perfect_score_achievement'
        })

        kinds = [n['kind'] for n in service.drain('u1')]

        assert kinds == ['level_up', 'streak', 'achievement']

    def test_quiet_quiz_queues_nothing(self):
        service = NotificationService()
        service.notify_quiz_gamification('u1', {'level_up': False, 'streak_milestone': False})

        assert service.drain('u1') == []
