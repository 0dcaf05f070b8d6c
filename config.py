"""
Configuration for the Exper gateway
Backend service locations and runtime settings, read from the environment
"""

import os
from dotenv import load_dotenv

load_dotenv()


def _float_env(name, default):
    value = os.environ.get(name)
    if value is None or value == '':
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}")


class Config:
    USER_SERVICE_URL = os.environ.get('USER_SERVICE_URL', 'http://localhost:8080/api')
    QUIZ_SERVICE_URL = os.environ.get('QUIZ_SERVICE_URL', 'http://localhost:9090/api')
    RESULTS_SERVICE_URL = os.environ.get('RESULTS_SERVICE_URL', 'http://localhost:8070/api')
    GAMIFICATION_SERVICE_URL = os.environ.get('GAMIFICATION_SERVICE_URL', 'http://localhost:9091/api')

    REQUEST_TIMEOUT = _float_env('REQUEST_TIMEOUT', 10.0)
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    ENVIRONMENT = os.environ.get('ENVIRONMENT', 'development')
    PORT = int(os.environ.get('PORT', 5000))
