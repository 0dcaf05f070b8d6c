import pytest

from services.gamification_service import PERFECT_SCORE_ACHIEVEMENT_ID, GamificationService
from utils.error_handler import ExternalServiceError, NotFoundError


def route_posts(responses):
    """Build a post side effect answering by path suffix"""
    def post(path, json=None, **kwargs):
        for suffix, response in responses.items():
            if path.endswith(suffix):
                if isinstance(response, Exception):
                    raise response
                return response
        return None
    return post


class TestGamificationService:

    def test_player_profile_created_with_username(self, mock_client):
        """Test passing a username asks the service to create the player"""
        mock_client.get.return_value = {'user_id': 'u1', 'level': 0}

        GamificationService(mock_client).get_player_profile('u1', username='ana')

        mock_client.get.assert_called_with('/player/u1', params={'username': 'ana'})

    def test_user_profile_endpoint(self, mock_client):
        mock_client.get.return_value = {'current_level': 2}

        assert GamificationService(mock_client).get_user_profile('u1') == {'current_level': 2}
        mock_client.get.assert_called_with('/player/u1/profile')

    def test_add_experience_payload(self, mock_client):
        GamificationService(mock_client).add_experience('u1', 150, 'python')

        mock_client.post.assert_called_with('/player/u1/xp', json={'xp': 150, 'category': 'python'})

    def test_user_achievements_unwraps_envelope(self, mock_client):
        mock_client.get.return_value = {'achievements': [{'id': 'a1'}]}

        assert GamificationService(mock_client).get_user_achievements('u1') == [{'id': 'a1'}]

    def test_active_campaign_missing_is_none(self, mock_client):
        """Test a player without a campaign gets None"""
        mock_client.get.side_effect = NotFoundError('No active campaign')

        assert GamificationService(mock_client).get_user_active_campaign('u1') is None

    def test_update_quest_progress_payload(self, mock_client):
        GamificationService(mock_client).update_quest_progress('u1', 'quest-2', 'complete_quiz_python')

        mock_client.post.assert_called_with(
            '/player/u1/quests/quest-2/progress',
            json={'objective_type': 'complete_quiz_python', 'progress': 1}
        )

    def test_level_progress(self):
        assert GamificationService.level_progress(2, 1200) == {
            'current': 2, 'next': 3, 'xp': 1200, 'required': 1500
        }


class TestRecordQuizCompletion:

    def test_perfect_score_flow(self, mock_client, sample_quiz):
        """Test XP, streak milestone and perfect score achievement"""
        mock_client.post.side_effect = route_posts({
            '/xp': {'level': 2, 'xp': 1200, 'level_up': False},
            '/streak': {'current_streak': 7},
            '/achievements': {'level_up': True, 'new_level': 3}
        })

        summary = GamificationService(mock_client).record_quiz_completion('u1', sample_quiz, 4, 4)

        assert summary['xp_gained'] == 225
        assert summary['level_up'] is True
        assert summary['level_progress'] == {'current': 3, 'next': 4, 'xp': 1200, 'required': 2000}
        assert summary['current_streak'] == 7
        assert summary['streak_milestone'] is True
        assert summary['achievement_awarded'] == PERFECT_SCORE_ACHIEVEMENT_ID

    def test_imperfect_score_skips_achievement(self, mock_client, sample_quiz):
        mock_client.post.side_effect = route_posts({
            '/xp': {'level': 1, 'xp': 600, 'level_up': True},
            '/streak': {'current_streak': 3}
        })

        summary = GamificationService(mock_client).record_quiz_completion('u1', sample_quiz, 2, 4)

        paths = [c[0][0] for c in mock_client.post.call_args_list]
        assert paths == ['/player/u1/xp', '/player/u1/streak']
        assert summary['level_up'] is True
        assert summary['level_progress']['required'] == 1000
        assert summary['streak_milestone'] is False
        assert summary['achievement_awarded'] is None

    @pytest.mark.parametrize('failing', ['/xp', '/streak', '/achievements'])
    def test_failing_step_does_not_break_the_rest(self, mock_client, sample_quiz, failing):
        """Test each gamification step fails on its own"""
        responses = {
            '/xp': {'level': 1, 'xp': 700},
            '/streak': {'current_streak': 2},
            '/achievements': {}
        }
        responses[failing] = ExternalServiceError('gamification service is unavailable')
        mock_client.post.side_effect = route_posts(responses)

        summary = GamificationService(mock_client).record_quiz_completion('u1', sample_quiz, 4, 4)

        assert summary['xp_gained'] == 225
        assert (summary['level_progress'] is None) == (failing == '/xp')
        assert (summary['current_streak'] is None) == (failing == '/streak')
        assert (summary['achievement_awarded'] is None) == (failing == '/achievements')
