"""
HTTP client for the Exper backend services
Thin wrapper over requests.Session that turns backend failures into ExperError subclasses
"""

import logging
import requests

from utils.error_handler import (
    AuthenticationError,
    AuthorizationError,
    ExternalServiceError,
    NotFoundError,
    ServiceResponseError,
)

logger = logging.getLogger(__name__)

STATUS_ERRORS = {
    401: (AuthenticationError, 'Authentication required'),
    403: (AuthorizationError, 'Not allowed'),
    404: (NotFoundError, 'Resource not found'),
}

class ServiceClient:
    def __init__(self, base_url, service_name, timeout=10, session=None):
        self.base_url = base_url.rstrip('/')
        self.service_name = service_name
        self.timeout = timeout
        self.session = session or requests.Session()

    def url(self, path):
        return f"{self.base_url}/{path.lstrip('/')}"

    def get(self, path, params=None, token=None):
        return self.request('GET', path, params=params, token=token)

    def post(self, path, json=None, params=None, files=None, token=None):
        return self.request('POST', path, json=json, params=params, files=files, token=token)

    def put(self, path, json=None, token=None):
        return self.request('PUT', path, json=json, token=token)

    def request(self, method, path, json=None, params=None, files=None, token=None):
        """
        Send a request and return the decoded JSON body (None when the body is empty)
        """
        url = self.url(path)
        headers = {'Accept': 'application/json'}
        if token:
            headers['Authorization'] = f'Bearer {token}'

        try:
            response = self.session.request(
                method,
                url,
                json=json,
                params=params,
                files=files,
                headers=headers,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"{self.service_name} unreachable: {method} {url}: {str(e)}")
            raise ExternalServiceError(f"{self.service_name} is unavailable", service_name=self.service_name)

        status_error = STATUS_ERRORS.get(response.status_code)
        if status_error:
            exc_class, default_message = status_error
            logger.warning(f"{self.service_name} returned {response.status_code} for {method} {url}")
            raise exc_class(self._error_message(response) or default_message)

        if not response.ok:
            message = self._error_message(response) or f"{self.service_name} request failed"
            logger.error(f"{self.service_name} error {response.status_code}: {method} {url}: {message}")
            raise ServiceResponseError(message, status_code=response.status_code, service_name=self.service_name)

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError:
            logger.error(f"{self.service_name} returned invalid JSON for {method} {url}")
            raise ServiceResponseError(f"Invalid response from {self.service_name}", service_name=self.service_name)

    @staticmethod
    def _error_message(response):
        try:
            body = response.json()
        except ValueError:
            return response.text or None
        if isinstance(body, dict):
            return body.get('message') or body.get('error')
        return None
