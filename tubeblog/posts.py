import re
import logging

from flask import Blueprint, abort, current_app, g, jsonify, make_response, render_template, request

from . import db, transcript
from .auth import login_required
from .generator import GenerationError, ParseError, ProviderError, generate as generate_post, sanitize_html

log = logging.getLogger(__name__)

bp = Blueprint('posts', __name__)


def _payload():
    if request.is_json:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}
    return request.form


def _admit():
    limiter = current_app.extensions['rate_limiter']
    allowed, wait = limiter.try_acquire(g.user['id'])
    if allowed:
        return None
    resp = jsonify({
        'error': f'Please wait {wait} seconds before generating another blog post.',
        'retry_after': wait,
    })
    resp.status_code = 429
    resp.headers['Retry-After'] = str(wait)
    return resp


def _run_pipeline(youtube_url, pasted, ai_model):
    try:
        text, source_url = transcript.acquire(youtube_url, pasted)
    except transcript.NoCaptionsError:
        return jsonify({'error': 'Captions not available for this video. Paste the transcript instead.'}), 400
    except transcript.TranscriptError as e:
        return jsonify({'error': str(e)}), 400

    try:
        post = generate_post(current_app.config, text, ai_model)
    except ProviderError as e:
        log.error('provider call failed: %s', e)
        return jsonify({'error': 'Failed to generate blog post. Please check your API keys and try again.'}), 502
    except ParseError:
        return jsonify({'error': 'Failed to parse AI response. Please try again.'}), 500

    post_id = db.create_post(db.get_db(), g.user['id'], post, source_url=source_url, ai_model=post['ai_model'])
    log.info('post %s saved for user %s: %s', post_id, g.user['id'], post['title'])
    return jsonify({'success': True, 'postId': post_id, 'title': post['title']})


@bp.route('/dashboard')
@login_required
def dashboard():
    rows = db.list_posts(db.get_db(), g.user['id'])
    return render_template('dashboard.html', user=g.user, posts=rows)


@bp.route('/generate', methods=['POST'])
@login_required
def generate():
    denied = _admit()
    if denied is not None:
        return denied
    data = _payload()
    return _run_pipeline(data.get('youtube_url'), data.get('transcript'), data.get('ai_model'))


@bp.route('/generate-from-transcript', methods=['POST'])
@login_required
def generate_from_transcript():
    denied = _admit()
    if denied is not None:
        return denied
    data = _payload()
    if not (data.get('transcript') or '').strip():
        return jsonify({'error': 'Please paste a transcript.'}), 400
    return _run_pipeline(None, data.get('transcript'), data.get('ai_model'))


def _owned_post(post_id):
    row = db.get_post(db.get_db(), post_id, g.user['id'])
    if row is None:
        abort(404)
    return row


@bp.route('/posts/<int:post_id>/edit')
@login_required
def edit(post_id):
    return render_template('post_edit.html', post=_owned_post(post_id))


@bp.route('/posts/<int:post_id>/save', methods=['POST'])
@login_required
def save(post_id):
    data = _payload()
    fields = {k: str(data.get(k) or '') for k in db.POST_FIELDS}
    if not fields['title'].strip():
        return jsonify({'error': 'Title is required'}), 400
    fields['content_html'] = sanitize_html(fields['content_html'])
    if not db.update_post(db.get_db(), post_id, g.user['id'], fields):
        abort(404)
    log.info('post %s updated', post_id)
    return jsonify({'success': True})


def download_filename(title):
    return re.sub(r'[^a-z0-9]', '_', title or 'post', flags=re.IGNORECASE) + '.html'


@bp.route('/posts/<int:post_id>/download')
@login_required
def download(post_id):
    post = _owned_post(post_id)
    resp = make_response(render_template('download.html', post=post))
    resp.headers['Content-Type'] = 'text/html; charset=utf-8'
    resp.headers['Content-Disposition'] = f'attachment; filename="{download_filename(post["title"])}"'
    return resp
