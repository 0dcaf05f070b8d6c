"""
Customization Service for the Exper gateway
Profile theme and displayed badges, stored by the gamification service
"""

import copy
import logging
import re

from utils.error_handler import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

CARD_STYLES = ('default', 'rounded', 'sharp')
HEX_COLOR = re.compile(r'^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$')
MAX_DISPLAY_BADGES = 10

DEFAULT_CUSTOMIZATION = {
    'theme': {
        'primaryColor': '#8b5cf6',
        'accentColor': '#f0abfc',
        'cardStyle': 'default',
        'showLevel': True,
        'showStreaks': True,
        'showAchievements': True,
        'backgroundPattern': 'none',
        'fontStyle': 'default'
    },
    'displayBadges': []
}

class CustomizationService:
    def __init__(self, client):
        self.client = client

    def get_user_customization(self, user_id):
        """
        Get a user's customization; users without one, or any failure, get the defaults
        """
        try:
            customization = self.client.get(f'/player/{user_id}/customization')
            return customization or self.get_default_customization()
        except NotFoundError:
            return self.get_default_customization()
        except Exception as e:
            logger.error(f"Error fetching user customization: {str(e)}")
            return self.get_default_customization()

    def save_user_customization(self, user_id, data):
        self._validate(data)

        try:
            result = self.client.post(f'/player/{user_id}/customization', json=data)
            logger.info(f"Saved customization for user {user_id}")
            return result
        except Exception as e:
            logger.error(f"Error saving customization: {str(e)}")
            raise

    @staticmethod
    def get_default_customization():
        return copy.deepcopy(DEFAULT_CUSTOMIZATION)

    @staticmethod
    def _validate(data):
        if not isinstance(data, dict) or not isinstance(data.get('theme'), dict):
            raise ValidationError("Customization must include a theme", field='theme')

        theme = data['theme']
        for field in ('primaryColor', 'accentColor'):
            if not HEX_COLOR.match(str(theme.get(field, ''))):
                raise ValidationError(f"{field} must be a hex colour", field=field)

        if theme.get('cardStyle') not in CARD_STYLES:
            raise ValidationError(f"cardStyle must be one of {', '.join(CARD_STYLES)}", field='cardStyle')

        badges = data.get('displayBadges', [])
        if not isinstance(badges, list) or len(badges) > MAX_DISPLAY_BADGES:
            raise ValidationError(f"displayBadges must be a list of at most {MAX_DISPLAY_BADGES}",
                                  field='displayBadges')
