"""
Auth Service for the Exper gateway
Wraps the user/auth service: registration, login, user lookup and quiz preferences
"""

import copy
import logging

from utils.error_handler import ValidationError

logger = logging.getLogger(__name__)

DIFFICULTIES = ('beginner', 'intermediate', 'expert')
MAX_QUESTION_COUNT = 50

DEFAULT_PREFERENCES = {
    'defaultQuestionCount': 5,
    'categories': {}
}

class AuthService:
    def __init__(self, client):
        self.client = client

    def register(self, user_data):
        """
        Register a new account with the user service
        """
        email = (user_data.get('email') or '').strip().lower()
        if not email or not user_data.get('password') or not user_data.get('username'):
            raise ValidationError("Email, username and password required")

        payload = {
            'email': email,
            'username': user_data['username'].strip(),
            'firstName': user_data.get('firstName', ''),
            'lastName': user_data.get('lastName', ''),
            'password': user_data['password']
        }
        if user_data.get('imageUrl'):
            payload['imageUrl'] = user_data['imageUrl']

        try:
            result = self.client.post('/auth/register', json=payload)
            logger.info(f"Registered new user: {email}")
            return result
        except Exception as e:
            logger.error(f"Error creating user: {str(e)}")
            raise

    def login(self, email, password):
        """
        Log a user in; the user service owns the session
        """
        email = (email or '').strip().lower()
        if not email or not password:
            raise ValidationError("Email and password required")

        try:
            result = self.client.post('/auth/login', json={'email': email, 'password': password})
            logger.info(f"User logged in: {email}")
            return result
        except Exception as e:
            logger.error(f"Error logging in: {str(e)}")
            raise

    def get_user(self, user_id, token=None):
        return self.client.get(f'/auth/users/{user_id}', token=token)

    def get_preferences(self, token=None):
        """
        Get quiz preferences, falling back to defaults when they cannot be loaded
        """
        try:
            preferences = self.client.get('/auth/preferences', token=token)
            if not isinstance(preferences, dict):
                return self.get_default_preferences()

            merged = self.get_default_preferences()
            merged.update(preferences)
            return merged
        except Exception as e:
            logger.error(f"Error loading preferences: {str(e)}")
            return self.get_default_preferences()

    def update_preferences(self, preferences, token=None):
        """
        Validate and save quiz preferences
        """
        self._validate_preferences(preferences)

        try:
            result = self.client.put('/auth/preferences', json=preferences, token=token)
            logger.info("Updated quiz preferences")
            return result if result is not None else preferences
        except Exception as e:
            logger.error(f"Error saving preferences: {str(e)}")
            raise

    @staticmethod
    def get_default_preferences():
        return copy.deepcopy(DEFAULT_PREFERENCES)

    @staticmethod
    def _validate_preferences(preferences):
        if not isinstance(preferences, dict):
            raise ValidationError("Preferences must be an object")

        default_count = preferences.get('defaultQuestionCount', DEFAULT_PREFERENCES['defaultQuestionCount'])
        if not isinstance(default_count, int) or not 1 <= default_count <= MAX_QUESTION_COUNT:
            raise ValidationError(
                f"defaultQuestionCount must be between 1 and {MAX_QUESTION_COUNT}",
                field='defaultQuestionCount'
            )

        categories = preferences.get('categories', {})
        if not isinstance(categories, dict):
            raise ValidationError("categories must be an object", field='categories')

        for category, pref in categories.items():
            if not isinstance(pref, dict) or pref.get('difficulty') not in DIFFICULTIES:
                raise ValidationError(f"Invalid difficulty for category '{category}'", field='categories')
            count = pref.get('questionCount')
            if not isinstance(count, int) or not 1 <= count <= MAX_QUESTION_COUNT:
                raise ValidationError(f"Invalid question count for category '{category}'", field='categories')
