import threading
import unittest

from community.client import ApiClient, SessionExpiredError


class FakeResponse:
    def __init__(self, status_code, payload=None):
        self.status_code = status_code
        self._payload = payload or {}

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise RuntimeError(f'HTTP {self.status_code}')


class FakeSession:
    """Accepts only the current access token; /auth/refresh hands out the next one."""

    def __init__(self, valid_token='fresh', refresh_ok=True, barrier=None):
        self.valid_token = valid_token
        self.refresh_ok = refresh_ok
        self.barrier = barrier
        self.refresh_calls = 0
        self.requests = []
        self.lock = threading.Lock()

    def request(self, method, url, headers=None, **kwargs):
        auth = (headers or {}).get('Authorization')
        with self.lock:
            self.requests.append((method, url, auth))
        if auth == f'Bearer {self.valid_token}':
            return FakeResponse(200, {'ok': True})
        if self.barrier is not None:
            # Hold every stale caller until all of them have seen their 401
            self.barrier.wait(timeout=5)
        return FakeResponse(401, {'statusCode': 401})

    def post(self, url, json=None, **kwargs):
        if url.endswith('/auth/refresh'):
            with self.lock:
                self.refresh_calls += 1
            if not self.refresh_ok or json.get('refresh_token') != 'refresh-1':
                return FakeResponse(401)
            return FakeResponse(200, {'access_token': self.valid_token, 'user': {'id': 1}})
        if url.endswith('/auth/login'):
            return FakeResponse(200, {'access_token': 'stale', 'refresh_token': 'refresh-1',
                                      'user': {'id': 1, 'loginId': json['loginId']}})
        if url.endswith('/auth/logout'):
            return FakeResponse(200, {'message': 'ok'})
        return FakeResponse(404)


class ApiClientTestCase(unittest.TestCase):
    def _client(self, **session_kwargs):
        session = FakeSession(**session_kwargs)
        client = ApiClient('http://api.test/', session=session)
        client.login('alice', 'pass1234')
        return client, session

    def test_attaches_bearer_token(self):
        client, session = self._client(valid_token='stale')
        response = client.get('/posts/all')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(session.requests[0], ('GET', 'http://api.test/posts/all', 'Bearer stale'))
        self.assertEqual(session.refresh_calls, 0)

    def test_refreshes_once_and_retries(self):
        client, session = self._client()
        response = client.post('/posts', json={'title': 'Hello'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(session.refresh_calls, 1)
        self.assertEqual(client.access_token, 'fresh')
        self.assertEqual(client.refresh_token, 'refresh-1')
        self.assertEqual([r[2] for r in session.requests], ['Bearer stale', 'Bearer fresh'])

    def test_failed_refresh_clears_session(self):
        client, session = self._client(refresh_ok=False)
        with self.assertRaises(SessionExpiredError):
            client.get('/messages/all')
        self.assertIsNone(client.access_token)
        self.assertIsNone(client.refresh_token)
        self.assertIsNone(client.user)

    def test_concurrent_401s_share_one_refresh(self):
        client, session = self._client(barrier=threading.Barrier(3))
        results = []

        def call():
            results.append(client.get('/messages/all').status_code)

        threads = [threading.Thread(target=call) for _ in range(3)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        self.assertEqual(results, [200, 200, 200])
        self.assertEqual(session.refresh_calls, 1)

    def test_logout_clears_session(self):
        client, session = self._client()
        client.logout()
        self.assertIsNone(client.access_token)
        self.assertIsNone(client.refresh_token)

    def test_auth_endpoints_are_not_retried(self):
        client, session = self._client()
        response = client.get('/auth/check-id', params={'loginId': 'alice'})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(session.refresh_calls, 0)


if __name__ == '__main__':
    unittest.main()
