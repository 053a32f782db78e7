import logging

from flask import Flask, jsonify, render_template, request
from werkzeug.exceptions import HTTPException

from . import db
from .config import load_config
from .ratelimit import RateLimiter

log = logging.getLogger('tubeblog')

GENERATE_COOLDOWN = 30


def _wants_json():
    if request.is_json:
        return True
    if request.method == 'POST' and (request.path.startswith('/generate') or request.path.startswith('/posts/')):
        return True
    return request.accept_mimetypes.best == 'application/json'


def create_app(config=None):
    cfg = load_config(config)
    logging.basicConfig(
        level=str(cfg['LOG_LEVEL']).upper(),
        format='%(asctime)s | %(levelname)s | %(name)s | %(message)s',
    )
    app = Flask(__name__)
    app.config.update(cfg)

    db.init_db(app.config['DATABASE_FILE'])
    log.info('database ready at %s', app.config['DATABASE_FILE'])
    app.teardown_appcontext(db.close_db)
    app.extensions['rate_limiter'] = RateLimiter(window=GENERATE_COOLDOWN)

    from .auth import bp as auth_bp
    from .posts import bp as posts_bp
    app.register_blueprint(auth_bp)
    app.register_blueprint(posts_bp)

    @app.route('/healthz')
    def healthz():
        return 'OK', 200, {'Content-Type': 'text/plain; charset=utf-8'}

    @app.route('/')
    def index():
        return render_template('index.html')

    @app.errorhandler(404)
    def not_found(e):
        if _wants_json():
            return jsonify({'error': 'Post not found'}), 404
        return render_template('error.html', message='Not found'), 404

    @app.errorhandler(Exception)
    def unexpected(e):
        if isinstance(e, HTTPException):
            return e
        log.exception('unhandled error on %s %s', request.method, request.path)
        if _wants_json():
            return jsonify({'error': 'Something went wrong. Please try again.'}), 500
        return render_template('error.html', message='Something went wrong. Please try again.'), 500

    return app
