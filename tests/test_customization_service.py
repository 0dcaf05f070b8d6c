import pytest

from services.customization_service import CustomizationService, MAX_DISPLAY_BADGES
from utils.error_handler import ExternalServiceError, NotFoundError, ValidationError


def valid_customization(**theme_overrides):
    customization = CustomizationService.get_default_customization()
    customization['theme'].update(theme_overrides)
    return customization


class TestCustomizationService:

    def test_get_existing_customization(self, mock_client):
        stored = valid_customization(primaryColor='#123456')
        mock_client.get.return_value = stored

        assert CustomizationService(mock_client).get_user_customization('u1') == stored
        mock_client.get.assert_called_with('/player/u1/customization')

    @pytest.mark.parametrize('error', [
        NotFoundError('Customization not found'),
        ExternalServiceError('gamification service is unavailable'),
    ])
    def test_missing_customization_uses_defaults(self, mock_client, error):
        """Test users without a stored customization get the defaults"""
        mock_client.get.side_effect = error

        customization = CustomizationService(mock_client).get_user_customization('u1')

        assert customization['theme']['primaryColor'] == '#8b5cf6'
        assert customization['theme']['accentColor'] == '#f0abfc'
        assert customization['displayBadges'] == []

    def test_save_valid_customization(self, mock_client):
        mock_client.post.return_value = {'success': True}
        data = valid_customization(cardStyle='rounded', accentColor='#fff')
        data['displayBadges'] = ['b1', 'b2']

        result = CustomizationService(mock_client).save_user_customization('u1', data)

        assert result == {'success': True}
        mock_client.post.assert_called_with('/player/u1/customization', json=data)

    @pytest.mark.parametrize('data', [
        None,
        {'displayBadges': []},
        valid_customization(primaryColor='purple'),
        valid_customization(accentColor='#12345'),
        valid_customization(cardStyle='bubbly'),
    ])
    def test_invalid_customization(self, mock_client, data):
        """Test invalid themes never reach the gamification service"""
        with pytest.raises(ValidationError):
            CustomizationService(mock_client).save_user_customization('u1', data)
        mock_client.post.assert_not_called()

    def test_too_many_display_badges(self, mock_client):
        data = valid_customization()
        data['displayBadges'] = [f'b{i}' for i in range(MAX_DISPLAY_BADGES + 1)]

        with pytest.raises(ValidationError, match='displayBadges'):
            CustomizationService(mock_client).save_user_customization('u1', data)
