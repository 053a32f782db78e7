import logging
import functools

from flask import Blueprint, current_app, g, redirect, render_template, request, url_for
from werkzeug.security import check_password_hash, generate_password_hash

from . import db, mailer, tokens
from .config import is_production

log = logging.getLogger(__name__)

bp = Blueprint('auth', __name__)

MIN_PASSWORD = 6


def _cookie_name():
    return current_app.config['SESSION_COOKIE_NAME']


def _to_login():
    resp = redirect(url_for('auth.login'))
    resp.delete_cookie(_cookie_name())
    return resp


def login_required(view_func):
    @functools.wraps(view_func)
    def wrapper(*args, **kwargs):
        token = request.cookies.get(_cookie_name())
        if not token:
            return redirect(url_for('auth.login'))
        user_id = tokens.verify(current_app.config['SECRET_KEY'], token, tokens.SESSION)
        if user_id is None:
            return _to_login()
        user = db.get_user(db.get_db(), user_id)
        if not user or not user['verified']:
            return _to_login()
        g.user = user
        return view_func(*args, **kwargs)
    return wrapper


@bp.route('/signup', methods=['GET', 'POST'])
def signup():
    if request.method == 'GET':
        return render_template('signup.html')
    name = request.form.get('name', '').strip()
    email = request.form.get('email', '').strip().lower()
    password = request.form.get('password', '')
    form = {'name': name, 'email': email}
    if not name or not email or not password:
        return render_template('signup.html', error='All fields are required', form=form), 400
    if len(password) < MIN_PASSWORD:
        return render_template('signup.html', error=f'Password must be at least {MIN_PASSWORD} characters', form=form), 400
    conn = db.get_db()
    if db.get_user_by_email(conn, email):
        return render_template('signup.html', error='Email already registered', form=form), 400

    user_id = db.create_user(conn, name, email, generate_password_hash(password))
    token = tokens.issue(current_app.config['SECRET_KEY'], user_id, tokens.EMAIL_VERIFY, email=email)
    verify_url = url_for('auth.verify', token=token, _external=True)
    try:
        mailer.send_verification(current_app.config, name, email, verify_url)
    except mailer.MailError:
        log.exception('could not send verification email to %s', email)
        db.delete_user(conn, user_id)
        return render_template('signup.html', error='An error occurred. Please try again.', form=form), 500
    log.info('user %s signed up', email)
    return render_template('verify.html', message='Success! Check your email to verify your account.', kind='success')


@bp.route('/verify')
def verify():
    token = request.args.get('token', '')
    if not token:
        return render_template('verify.html', message='Invalid verification link', kind='error'), 400
    user_id = tokens.verify(current_app.config['SECRET_KEY'], token, tokens.EMAIL_VERIFY)
    if user_id is None or not db.mark_verified(db.get_db(), user_id):
        return render_template('verify.html', message='Verification link is invalid or expired', kind='error'), 400
    log.info('user %s verified', user_id)
    return render_template('verify.html', message='Email verified successfully! You can now log in.', kind='success', show_login=True)


@bp.route('/login', methods=['GET', 'POST'])
def login():
    if request.method == 'GET':
        return render_template('login.html')
    email = request.form.get('email', '').strip().lower()
    password = request.form.get('password', '')
    user = db.get_user_by_email(db.get_db(), email) if email else None
    if not user or not check_password_hash(user['password_hash'], password):
        return render_template('login.html', error='Invalid email or password', email=email), 400
    if not user['verified']:
        return render_template('login.html', error='Please verify your email before logging in', email=email), 400

    token = tokens.issue(current_app.config['SECRET_KEY'], user['id'], tokens.SESSION, email=user['email'])
    resp = redirect(url_for('posts.dashboard'))
    resp.set_cookie(
        _cookie_name(),
        token,
        max_age=tokens.TTLS[tokens.SESSION],
        httponly=True,
        secure=is_production(current_app.config),
        samesite='Lax',
    )
    log.info('user %s logged in', email)
    return resp


@bp.route('/logout')
def logout():
    resp = redirect(url_for('index'))
    resp.delete_cookie(_cookie_name())
    return resp
