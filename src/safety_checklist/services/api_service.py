"""API service for HTTP client abstraction."""
import requests
import time
import logging


class APIService:
    """HTTP client for backend API calls with error handling and retry logic.

    Client errors (4xx) are returned to the caller immediately, except 408 and
    429 which are retried along with 5xx responses and connection failures.
    """

    RETRYABLE_CLIENT_ERRORS = (408, 429)

    def __init__(self, base_url='http://localhost:5000', max_retries=3, retry_delay=1.0, timeout=10.0, auth_service=None):
        self.base_url = base_url.rstrip('/')
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.auth_service = auth_service
        self.logger = logging.getLogger(self.__class__.__name__)

    @classmethod
    def from_config(cls, config, auth_service=None):
        return cls(
            base_url=config.api_base_url,
            max_retries=config.api_max_retries,
            retry_delay=config.api_retry_delay,
            timeout=config.api_timeout,
            auth_service=auth_service,
        )

    def _merge_headers(self, kwargs):
        """Merge auth headers with any provided headers in kwargs."""
        auth_headers = self.auth_service.get_headers() if self.auth_service else {}
        if not auth_headers:
            return kwargs
        existing_headers = kwargs.get('headers') or {}
        # Auth headers take precedence
        kwargs['headers'] = {**existing_headers, **auth_headers}
        return kwargs

    def _should_retry(self, response):
        if response.status_code >= 500:
            return True
        return response.status_code in self.RETRYABLE_CLIENT_ERRORS

    def _make_request(self, method, url, **kwargs):
        """Make HTTP request with retry and exponential backoff."""
        kwargs = self._merge_headers(kwargs)
        kwargs.setdefault('timeout', self.timeout)

        last_exception = None
        response = None

        for attempt in range(self.max_retries):
            try:
                response = requests.request(method, url, **kwargs)
                if not self._should_retry(response):
                    return response
                if attempt < self.max_retries - 1:
                    self.logger.warning(f"Request failed (attempt {attempt + 1}/{self.max_retries}): {response.status_code} {response.reason}")
                    time.sleep(self.retry_delay * (2 ** attempt))
            except requests.exceptions.RequestException as e:
                last_exception = e
                if attempt < self.max_retries - 1:
                    self.logger.warning(f"Request exception (attempt {attempt + 1}/{self.max_retries}): {e}")
                    time.sleep(self.retry_delay * (2 ** attempt))
                else:
                    self.logger.error(f"Request failed after {self.max_retries} attempts: {e}")

        if response is not None and last_exception is None:
            # Retries exhausted on a retryable status; let the caller inspect it
            return response
        if last_exception:
            raise last_exception
        raise requests.exceptions.RequestException("All retry attempts failed")

    def get(self, endpoint, **kwargs):
        """GET request with error handling and retry."""
        return self._make_request('GET', f"{self.base_url}{endpoint}", **kwargs)

    def post(self, endpoint, **kwargs):
        """POST request with error handling and retry."""
        return self._make_request('POST', f"{self.base_url}{endpoint}", **kwargs)

    def delete(self, endpoint, **kwargs):
        """DELETE request with error handling and retry."""
        return self._make_request('DELETE', f"{self.base_url}{endpoint}", **kwargs)

    def upload_file(self, endpoint, file_name, file_data, content_type, data=None, timeout=60):
        """Upload one file as multipart/form-data under the 'file' field."""
        files = {'file': (file_name, file_data, content_type)}
        return self._make_request('POST', f"{self.base_url}{endpoint}", files=files, data=data, timeout=timeout)

    @staticmethod
    def error_message(response, default):
        """Extract the backend's JSON 'error' field, falling back to default."""
        try:
            return response.json().get('error', default)
        except ValueError:
            return default
