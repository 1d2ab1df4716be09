import unittest

from community import create_app, db
from community.models import User
from config import TestingConfig


class UserTestCase(unittest.TestCase):
    def setUp(self):
        self.app = create_app(TestingConfig)
        self.client = self.app.test_client()
        self.app_context = self.app.app_context()
        self.app_context.push()
        db.create_all()

        alice = self._register('alice', 'Alice')
        self.alice_id = alice['user']['id']
        self.alice_headers = {'Authorization': f"Bearer {alice['access_token']}"}
        bob = self._register('bob', 'Bob')
        self.bob_id = bob['user']['id']
        self.bob_headers = {'Authorization': f"Bearer {bob['access_token']}"}

    def tearDown(self):
        db.session.remove()
        db.drop_all()
        self.app_context.pop()

    def _register(self, login_id, name):
        return self.client.post('/auth/register', json={
            'loginId': login_id, 'password': 'pass1234', 'name': name}).get_json()

    def test_listing_hides_password(self):
        users = self.client.get('/user/all').get_json()
        self.assertEqual([u['id'] for u in users], [self.alice_id, self.bob_id])
        for user in users:
            self.assertNotIn('password', user)
            self.assertNotIn('password_hash', user)

        info = self.client.get('/user/info').get_json()
        self.assertEqual(set(info[0].keys()), {'id', 'name', 'giturl', 'image'})

    def test_get_one(self):
        self.assertEqual(self.client.get(f'/user/{self.bob_id}').get_json()['loginId'], 'bob')
        self.assertEqual(self.client.get('/user/999').status_code, 404)

    def test_update_own_profile(self):
        response = self.client.patch(f'/user/{self.alice_id}', json={
            'name': '앨리스', 'giturl': 'https://github.com/alice', 'image': '/uploads/me.png',
        }, headers=self.alice_headers)
        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertEqual(data['name'], '앨리스')
        self.assertEqual(data['giturl'], 'https://github.com/alice')
        self.assertEqual(data['image'], '/uploads/me.png')

    def test_cannot_update_other_user(self):
        response = self.client.patch(f'/user/{self.bob_id}', json={'name': 'Mallory'}, headers=self.alice_headers)
        self.assertEqual(response.status_code, 403)
        db.session.expire_all()
        self.assertEqual(db.session.get(User, self.bob_id).name, 'Bob')

    def test_password_change_requires_current_password(self):
        url = f'/user/{self.alice_id}'
        response = self.client.patch(url, json={'password': 'newpass99'}, headers=self.alice_headers)
        self.assertEqual(response.status_code, 400)
        response = self.client.patch(url, json={'password': 'newpass99', 'currentPassword': 'wrong'},
                                     headers=self.alice_headers)
        self.assertEqual(response.status_code, 400)

        response = self.client.patch(url, json={'password': 'newpass99', 'currentPassword': 'pass1234'},
                                     headers=self.alice_headers)
        self.assertEqual(response.status_code, 200)

        login = self.client.post('/auth/login', json={'loginId': 'alice', 'password': 'newpass99'})
        self.assertEqual(login.status_code, 200)
        login = self.client.post('/auth/login', json={'loginId': 'alice', 'password': 'pass1234'})
        self.assertEqual(login.status_code, 401)

    def test_update_rejects_non_string_fields(self):
        url = f'/user/{self.alice_id}'
        for payload in ({'image': 42}, {'image': ['/uploads/me.png']},
                        {'password': 'newpass99', 'currentPassword': 1234},
                        {'password': 'newpass99', 'currentPassword': {'value': 'pass1234'}}):
            with self.subTest(payload=payload):
                response = self.client.patch(url, json=payload, headers=self.alice_headers)
                self.assertEqual(response.status_code, 400)
        db.session.expire_all()
        alice = db.session.get(User, self.alice_id)
        self.assertEqual(alice.image, self.app.config['DEFAULT_PROFILE_IMAGE'])
        self.assertTrue(alice.check_password('pass1234'))


if __name__ == '__main__':
    unittest.main()
