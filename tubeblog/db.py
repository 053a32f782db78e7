import os
import sqlite3
import datetime

from flask import current_app, g

POST_FIELDS = ('title', 'meta_description', 'seo_keywords', 'summary', 'content_html')

SCHEMA = (
    'CREATE TABLE IF NOT EXISTS users (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT NOT NULL, email TEXT UNIQUE NOT NULL, password_hash TEXT NOT NULL, verified INTEGER DEFAULT 0, created_at TEXT)',
    'CREATE TABLE IF NOT EXISTS posts (id INTEGER PRIMARY KEY AUTOINCREMENT, user_id INTEGER NOT NULL, title TEXT NOT NULL, meta_description TEXT, seo_keywords TEXT, summary TEXT, content_html TEXT, youtube_url TEXT, ai_model TEXT DEFAULT \'OpenAI\', created_at TEXT, updated_at TEXT, FOREIGN KEY(user_id) REFERENCES users(id))',
    'CREATE INDEX IF NOT EXISTS idx_posts_user ON posts(user_id)',
)


def _now():
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def connect(path):
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    conn.execute('PRAGMA foreign_keys = ON')
    return conn


def init_db(path):
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    conn = connect(path)
    try:
        for stmt in SCHEMA:
            conn.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def get_db():
    if 'db' not in g:
        g.db = connect(current_app.config['DATABASE_FILE'])
    return g.db


def close_db(exc=None):
    conn = g.pop('db', None)
    if conn is not None:
        conn.close()


def create_user(conn, name, email, password_hash):
    cur = conn.execute(
        'INSERT INTO users (name, email, password_hash, verified, created_at) VALUES (?, ?, ?, 0, ?)',
        (name, email, password_hash, _now()),
    )
    conn.commit()
    return cur.lastrowid


def get_user(conn, user_id):
    return conn.execute('SELECT * FROM users WHERE id=?', (user_id,)).fetchone()


def get_user_by_email(conn, email):
    return conn.execute('SELECT * FROM users WHERE email=?', (email,)).fetchone()


def delete_user(conn, user_id):
    conn.execute('DELETE FROM users WHERE id=? AND verified=0', (user_id,))
    conn.commit()


def mark_verified(conn, user_id):
    cur = conn.execute('UPDATE users SET verified=1 WHERE id=?', (user_id,))
    conn.commit()
    return cur.rowcount > 0


def create_post(conn, user_id, fields, source_url=None, ai_model='OpenAI'):
    now = _now()
    cur = conn.execute(
        'INSERT INTO posts (user_id, title, meta_description, seo_keywords, summary, content_html, youtube_url, ai_model, created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)',
        (
            user_id,
            fields.get('title') or 'Untitled',
            fields.get('meta_description') or '',
            fields.get('seo_keywords') or '',
            fields.get('summary') or '',
            fields.get('content_html') or '',
            source_url,
            ai_model or 'OpenAI',
            now,
            now,
        ),
    )
    conn.commit()
    return cur.lastrowid


def list_posts(conn, user_id):
    return conn.execute(
        'SELECT id, title, youtube_url, ai_model, created_at, updated_at FROM posts WHERE user_id=? ORDER BY created_at DESC, id DESC',
        (user_id,),
    ).fetchall()


def get_post(conn, post_id, user_id):
    return conn.execute('SELECT * FROM posts WHERE id=? AND user_id=?', (post_id, user_id)).fetchone()


def update_post(conn, post_id, user_id, fields):
    cur = conn.execute(
        'UPDATE posts SET title=?, meta_description=?, seo_keywords=?, summary=?, content_html=?, updated_at=? WHERE id=? AND user_id=?',
        tuple(fields.get(k) or '' for k in POST_FIELDS) + (_now(), post_id, user_id),
    )
    conn.commit()
    return cur.rowcount > 0
