import unittest

from community import create_app, db
from community.models import Message
from config import TestingConfig


class MessageTestCase(unittest.TestCase):
    def setUp(self):
        self.app = create_app(TestingConfig)
        self.client = self.app.test_client()
        self.app_context = self.app.app_context()
        self.app_context.push()
        db.create_all()

        self.users = {}
        for login_id, name in (('alice', 'Alice'), ('bob', 'Bob'), ('carol', 'Carol')):
            data = self.client.post('/auth/register', json={
                'loginId': login_id, 'password': 'pass1234', 'name': name}).get_json()
            self.users[login_id] = {
                'id': data['user']['id'],
                'headers': {'Authorization': f"Bearer {data['access_token']}"},
            }

    def tearDown(self):
        db.session.remove()
        db.drop_all()
        self.app_context.pop()

    def _send(self, sender, receiver, title='Hi', content='How are you?'):
        return self.client.post('/messages', json={
            'receiverId': self.users[receiver]['id'], 'title': title, 'content': content,
        }, headers=self.users[sender]['headers'])

    def test_send_message(self):
        response = self._send('alice', 'bob')
        self.assertEqual(response.status_code, 201)
        data = response.get_json()
        self.assertEqual(data['senderId'], self.users['alice']['id'])
        self.assertEqual(data['receiverId'], self.users['bob']['id'])
        self.assertFalse(data['isRead'])

    def test_send_validation(self):
        self.assertEqual(self._send('alice', 'bob', title='').status_code, 400)
        response = self.client.post('/messages', json={'receiverId': 999, 'title': 'Hi', 'content': 'x'},
                                    headers=self.users['alice']['headers'])
        self.assertEqual(response.status_code, 404)
        self.assertEqual(Message.query.count(), 0)

    def test_list_contains_only_own_messages(self):
        self._send('alice', 'bob')
        self._send('bob', 'alice')
        self._send('bob', 'carol')

        alice_messages = self.client.get('/messages/all', headers=self.users['alice']['headers']).get_json()
        self.assertEqual(len(alice_messages), 2)
        carol_messages = self.client.get('/messages/all', headers=self.users['carol']['headers']).get_json()
        self.assertEqual(len(carol_messages), 1)
        self.assertEqual(self.client.get('/messages/all').status_code, 401)

    def test_receiver_marks_read(self):
        message_id = self._send('alice', 'bob').get_json()['id']
        response = self.client.patch(f'/messages/{message_id}', json={'isRead': True},
                                     headers=self.users['bob']['headers'])
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.get_json()['isRead'])

        response = self.client.patch(f'/messages/{message_id}', json={'isRead': 'yes'},
                                     headers=self.users['bob']['headers'])
        self.assertEqual(response.status_code, 400)

    def test_outsider_cannot_read_update_or_delete(self):
        message_id = self._send('alice', 'bob').get_json()['id']
        carol = self.users['carol']['headers']

        self.assertEqual(self.client.get(f'/messages/{message_id}', headers=carol).status_code, 403)
        response = self.client.patch(f'/messages/{message_id}', json={'isRead': True}, headers=carol)
        self.assertEqual(response.status_code, 403)
        self.assertEqual(self.client.delete(f'/messages/{message_id}', headers=carol).status_code, 403)

        db.session.expire_all()
        message = db.session.get(Message, message_id)
        self.assertIsNotNone(message)
        self.assertFalse(message.is_read)

    def test_participants_can_read_and_delete(self):
        message_id = self._send('alice', 'bob').get_json()['id']
        response = self.client.get(f'/messages/{message_id}', headers=self.users['bob']['headers'])
        self.assertEqual(response.get_json()['title'], 'Hi')

        response = self.client.delete(f'/messages/{message_id}', headers=self.users['alice']['headers'])
        self.assertEqual(response.status_code, 200)
        self.assertEqual(Message.query.count(), 0)

    def test_missing_message(self):
        response = self.client.get('/messages/999', headers=self.users['alice']['headers'])
        self.assertEqual(response.status_code, 404)


if __name__ == '__main__':
    unittest.main()
