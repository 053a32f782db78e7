import pytest
import requests
from werkzeug.security import generate_password_hash

from tubeblog import create_app, db


class DummyResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f'status {self.status_code}')

    def json(self):
        return self._payload


def chat_response(content):
    return DummyResponse({'choices': [{'message': {'role': 'assistant', 'content': content}}]})


@pytest.fixture
def app(tmp_path):
    return create_app({
        'DATABASE_FILE': str(tmp_path / 'data' / 'test.sqlite'),
        'SESSION_SECRET': 'test-secret',
        'SMTP_HOST': '',
        'OPENAI_API_KEY': 'test-key',
        'AI_PROVIDER': 'OpenAI',
        'APP_ENV': 'test',
        'TESTING': True,
    })


@pytest.fixture
def client(app):
    return app.test_client()


def make_user(app, email='alice@example.com', password='secret123', name='Alice', verified=True):
    conn = db.connect(app.config['DATABASE_FILE'])
    try:
        user_id = db.create_user(conn, name, email, generate_password_hash(password))
        if verified:
            db.mark_verified(conn, user_id)
    finally:
        conn.close()
    return user_id


def login(client, email='alice@example.com', password='secret123'):
    return client.post('/login', data={'email': email, 'password': password})


def count_posts(app):
    conn = db.connect(app.config['DATABASE_FILE'])
    try:
        return conn.execute('SELECT COUNT(*) FROM posts').fetchone()[0]
    finally:
        conn.close()


def fetch_user(app, user_id):
    conn = db.connect(app.config['DATABASE_FILE'])
    try:
        return db.get_user(conn, user_id)
    finally:
        conn.close()


def count_users(app):
    conn = db.connect(app.config['DATABASE_FILE'])
    try:
        return conn.execute('SELECT COUNT(*) FROM users').fetchone()[0]
    finally:
        conn.close()
