import unittest

from community import create_app, db
from community.models import Semester
from config import TestingConfig


class SemesterTestCase(unittest.TestCase):
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
        self.bob_headers = {'Authorization': f"Bearer {bob['access_token']}"}

    def tearDown(self):
        db.session.remove()
        db.drop_all()
        self.app_context.pop()

    def _register(self, login_id, name):
        return self.client.post('/auth/register', json={
            'loginId': login_id, 'password': 'pass1234', 'name': name}).get_json()

    def _create(self, headers, title='Spring in Kyoto', description='Two weeks of temples'):
        return self.client.post('/semester', json={'title': title, 'description': description},
                                headers=headers)

    def test_create_list_and_info(self):
        response = self._create(self.alice_headers)
        self.assertEqual(response.status_code, 201)
        semester = response.get_json()
        self.assertEqual(semester['authorId'], self.alice_id)
        self.assertEqual(semester['author']['name'], 'Alice')

        self.assertEqual(len(self.client.get('/semester/all').get_json()), 1)
        info = self.client.get('/semester/info').get_json()
        self.assertEqual(set(info[0].keys()), {'id', 'title', 'description', 'imageUrl'})
        self.assertEqual(self.client.get(f"/semester/{semester['id']}").get_json()['title'], 'Spring in Kyoto')

    def test_create_validation(self):
        self.assertEqual(self._create(self.alice_headers, title='').status_code, 400)
        self.assertEqual(self._create(self.alice_headers, description='').status_code, 400)
        self.assertEqual(Semester.query.count(), 0)

    def test_image_url_must_be_a_string(self):
        response = self.client.post('/semester', json={'title': 'Kyoto', 'description': 'Temples', 'imageUrl': 7},
                                    headers=self.alice_headers)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(Semester.query.count(), 0)

        semester_id = self._create(self.alice_headers).get_json()['id']
        response = self.client.patch(f'/semester/{semester_id}', json={'imageUrl': ['/uploads/k.png']},
                                     headers=self.alice_headers)
        self.assertEqual(response.status_code, 400)
        self.assertIsNone(self.client.get(f'/semester/{semester_id}').get_json()['imageUrl'])

    def test_owner_update_and_delete(self):
        semester_id = self._create(self.alice_headers).get_json()['id']
        response = self.client.patch(f'/semester/{semester_id}', json={'imageUrl': '/uploads/k.png'},
                                     headers=self.alice_headers)
        self.assertEqual(response.get_json()['imageUrl'], '/uploads/k.png')

        response = self.client.delete(f'/semester/{semester_id}', headers=self.alice_headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.client.get(f'/semester/{semester_id}').status_code, 404)

    def test_non_owner_cannot_update_or_delete(self):
        semester_id = self._create(self.alice_headers).get_json()['id']
        response = self.client.patch(f'/semester/{semester_id}', json={'title': 'Mine now'},
                                     headers=self.bob_headers)
        self.assertEqual(response.status_code, 403)
        response = self.client.delete(f'/semester/{semester_id}', headers=self.bob_headers)
        self.assertEqual(response.status_code, 403)

        db.session.expire_all()
        self.assertEqual(db.session.get(Semester, semester_id).title, 'Spring in Kyoto')


if __name__ == '__main__':
    unittest.main()
