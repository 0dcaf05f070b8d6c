"""
Results Service for the Exper gateway
Wraps the results service: stores quiz attempts and reads a user's history
"""

from collections import OrderedDict
from datetime import datetime
import logging

import pytz
from dateutil import parser as date_parser

from utils.error_handler import ValidationError

logger = logging.getLogger(__name__)

class ResultsService:
    def __init__(self, client):
        self.client = client

    def submit_result(self, result, token=None):
        """
        Store a finished quiz attempt
        """
        if not result.get('userId'):
            raise ValidationError("No userId provided", field='userId')

        try:
            saved = self.client.post('/results', json=result, token=token)
            logger.info(f"Result saved - User: {result['userId']}, Quiz: {result.get('quizId')}, "
                        f"Score: {result.get('score')}/{result.get('totalQuestions')}")
            return saved
        except Exception as e:
            logger.error(f"Error saving result: {str(e)}")
            raise

    def get_user_results(self, user_id):
        """
        Get a user's results with the percentage filled in where the backend left it out
        """
        try:
            results = self.client.get(f'/results/user/{user_id}') or []
        except Exception as e:
            logger.error(f"Error fetching results for user {user_id}: {str(e)}")
            raise

        processed = []
        for result in results:
            entry = dict(result)
            if not entry.get('percentage'):
                total = entry.get('totalQuestions') or 0
                entry['percentage'] = ((entry.get('score') or 0) / total * 100) if total else 0
            processed.append(entry)
        return processed

    def get_category_progress(self, user_id, category):
        """
        Results in one category, oldest first
        """
        results = [r for r in self.get_user_results(user_id) if r.get('category') == category]
        results.sort(key=lambda r: parse_timestamp(r.get('created_at')))
        return results

    @staticmethod
    def group_by_quiz(results):
        groups = OrderedDict()
        for result in sorted(results, key=lambda r: parse_timestamp(r.get('created_at'))):
            groups.setdefault(result.get('quizId'), []).append(result)
        return groups


def parse_timestamp(value):
    """
    Parse a backend timestamp into an aware UTC datetime; unparseable values sort first
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = date_parser.isoparse(value) if value else None
        except (ValueError, TypeError):
            parsed = None

    if parsed is None:
        return datetime.min.replace(tzinfo=pytz.utc)
    if parsed.tzinfo is None:
        return pytz.utc.localize(parsed)
    return parsed.astimezone(pytz.utc)
