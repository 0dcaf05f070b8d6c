"""
Shared fixtures for the Exper gateway tests
"""

import os
import sys
from unittest.mock import Mock

import pytest

# Add project root to Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))


@pytest.fixture
def mock_client():
    """Mock ServiceClient"""
    return Mock()


@pytest.fixture
def mock_gamification():
    """Mock GamificationService"""
    return Mock()


@pytest.fixture
def sample_quiz():
    return {
        '_id': 'quiz-1',
        'id': 'quiz-1',
        'title': 'Python Basics',
        'description': 'Warm-up quiz',
        'difficulty': 'intermediate',
        'category': 'python',
        'questions': [
            {
                'id': 'q1',
                'question': 'Which keyword defines a function?',
                'options': ['def', 'fun', 'lambda', 'func'],
                'correctAnswer': 'def'
            },
            {
                'id': 'q2',
                'question': 'Which of these are immutable types?',
                'options': ['tuple', 'list', 'str', 'dict'],
                'correctAnswer': ['tuple', 'str'],
                'isMultiAnswer': True
            },
            {
                'id': 'q3',
                'question': 'What does len([]) return?',
                'options': ['0', '1', 'None', 'error'],
                'correctAnswer': ['0']
            },
            {
                'id': 'q4',
                'question': 'Which module handles regular expressions?',
                'options': ['re', 'regex', 'rx', 'pattern'],
                'correctAnswer': 're'
            }
        ]
    }


@pytest.fixture
def sample_campaign():
    return {
        'id': 'camp-1',
        'title': 'Data Structures Saga',
        'currentQuestId': 'quest-2',
        'quests': [
            {'id': 'quest-1', 'title': 'First Steps', 'completed': True},
            {'id': 'quest-2', 'title': 'List Master', 'completed': False},
            {'id': 'quest-3', 'title': 'Dict Wizard', 'completed': False, 'locked': True}
        ]
    }
