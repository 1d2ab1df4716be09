import logging
import threading

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


class SessionExpiredError(Exception):
    """Raised when the stored session can no longer be refreshed."""

    def __init__(self, message='세션이 만료되었습니다. 다시 로그인해주세요.'):
        super().__init__(message)
        self.message = message


class ApiClient:
    """
    Thin wrapper over a requests.Session for the community REST API.

    Attaches the bearer access token to each call. A 401 triggers one token
    refresh shared by every caller that hit the 401 at the same time, after
    which the failed call is retried once.
    """

    def __init__(self, base_url, session=None, timeout=DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout
        self.access_token = None
        self.refresh_token = None
        self.user = None
        self._refresh_lock = threading.Lock()
        # Bumped on every successful refresh so waiters can tell one already happened
        self._token_generation = 0

    def _url(self, path):
        return f"{self.base_url}/{path.lstrip('/')}"

    def _send(self, method, path, **kwargs):
        headers = dict(kwargs.pop('headers', None) or {})
        if self.access_token:
            headers['Authorization'] = f'Bearer {self.access_token}'
        kwargs.setdefault('timeout', self.timeout)
        return self.session.request(method, self._url(path), headers=headers, **kwargs)

    def _store_session(self, data):
        self.access_token = data.get('access_token')
        self.refresh_token = data.get('refresh_token', self.refresh_token)
        self.user = data.get('user', self.user)

    def clear_session(self):
        self.access_token = None
        self.refresh_token = None
        self.user = None

    def _refresh(self, seen_generation):
        with self._refresh_lock:
            if self._token_generation != seen_generation:
                return
            if not self.refresh_token:
                self.clear_session()
                raise SessionExpiredError()
            response = self.session.post(self._url('/auth/refresh'),
                                         json={'refresh_token': self.refresh_token},
                                         timeout=self.timeout)
            if response.status_code != 200:
                logger.warning(f"Token refresh failed with status {response.status_code}")
                self.clear_session()
                raise SessionExpiredError()
            self._store_session(response.json())
            self._token_generation += 1

    def request(self, method, path, **kwargs):
        generation = self._token_generation
        response = self._send(method, path, **kwargs)
        if response.status_code != 401 or path.lstrip('/').startswith('auth/'):
            return response

        self._refresh(generation)
        response = self._send(method, path, **kwargs)
        if response.status_code == 401:
            self.clear_session()
            raise SessionExpiredError()
        return response

    def get(self, path, **kwargs):
        return self.request('GET', path, **kwargs)

    def post(self, path, **kwargs):
        return self.request('POST', path, **kwargs)

    def patch(self, path, **kwargs):
        return self.request('PATCH', path, **kwargs)

    def delete(self, path, **kwargs):
        return self.request('DELETE', path, **kwargs)

    def login(self, login_id, password):
        response = self.session.post(self._url('/auth/login'),
                                     json={'loginId': login_id, 'password': password},
                                     timeout=self.timeout)
        response.raise_for_status()
        data = response.json()
        self._store_session(data)
        return data

    def register(self, login_id, password, name, **extra):
        payload = {'loginId': login_id, 'password': password, 'name': name, **extra}
        response = self.session.post(self._url('/auth/register'), json=payload, timeout=self.timeout)
        response.raise_for_status()
        data = response.json()
        self._store_session(data)
        return data

    def logout(self):
        try:
            if self.refresh_token:
                self.session.post(self._url('/auth/logout'),
                                  json={'refresh_token': self.refresh_token},
                                  timeout=self.timeout)
        finally:
            self.clear_session()
