import re
import json
import logging

import bleach
import requests
from bs4 import BeautifulSoup

log = logging.getLogger(__name__)

DEFAULT_PROVIDER = 'OpenAI'
TEMPERATURE = 0.7
MAX_TOKENS = 2000

ALLOWED_TAGS = frozenset([
    'h1', 'h2', 'h3', 'h4', 'p', 'ul', 'ol', 'li',
    'strong', 'em', 'b', 'i', 'br', 'blockquote', 'code', 'pre',
])
# Removed with their contents, not just unwrapped.
DROPPED_TAGS = ['script', 'style', 'iframe', 'object', 'embed', 'noscript', 'template']

SYSTEM_PROMPT = (
    'You are a professional blog writer. Convert supplied YouTube video transcript text into a clear, '
    'human-like, SEO-friendly blog post. Always return exactly one valid JSON object (no extra commentary).'
)

USER_PROMPT = '''Convert the following transcript into a blog post and return ONLY valid JSON with this exact structure:
{{
  "title": "Short, engaging title here",
  "meta_description": "SEO meta description (150-160 characters)",
  "seo_keywords": "keyword1, keyword2, keyword3",
  "summary": "2-3 sentence summary",
  "content_html": "<h2>Section</h2><p>Paragraphs...</p>"
}}
Transcript:
{transcript}
Notes:
- Use short sentences and simple words.
- Use 4-6 H2 sections.
- Add bullet lists (<ul><li>) where appropriate.
- Keep the length around 600-1200 words if the transcript is long.
- Do NOT invent facts beyond what is logical from the transcript.
'''

_FENCE = re.compile(r'```(?:json)?\s*\n?', re.IGNORECASE)


class GenerationError(Exception):
    pass


class ProviderError(GenerationError):
    pass


class ParseError(GenerationError):
    pass


def build_messages(transcript):
    return [
        {'role': 'system', 'content': SYSTEM_PROMPT},
        {'role': 'user', 'content': USER_PROMPT.format(transcript=transcript)},
    ]


def resolve_model_label(cfg, requested=None):
    label = str(requested or cfg.get('AI_PROVIDER') or DEFAULT_PROVIDER).strip()
    if label.lower() != DEFAULT_PROVIDER.lower():
        log.warning('%s selected but not implemented, falling back to %s', label, DEFAULT_PROVIDER)
    return label or DEFAULT_PROVIDER


def call_provider(cfg, messages):
    api_key = cfg.get('OPENAI_API_KEY')
    if not api_key:
        raise ProviderError('OPENAI_API_KEY is not configured')
    headers = {
        'Content-Type': 'application/json',
        'Authorization': f'Bearer {api_key}',
    }
    payload = {
        'model': cfg.get('OPENAI_MODEL') or 'gpt-4o-mini',
        'messages': messages,
        'temperature': TEMPERATURE,
        'max_tokens': MAX_TOKENS,
    }
    try:
        r = requests.post(cfg['OPENAI_API_URL'], headers=headers, json=payload, timeout=cfg.get('OPENAI_TIMEOUT') or 60)
        r.raise_for_status()
        data = r.json()
    except (requests.RequestException, ValueError) as e:
        raise ProviderError(str(e)) from e
    content = ''
    if isinstance(data, dict) and data.get('choices'):
        msg = (data['choices'][0] or {}).get('message') or {}
        content = msg.get('content') or ''
    if not content.strip():
        raise ProviderError('response did not contain any text')
    return content


def parse_response(raw):
    cleaned = _FENCE.sub('', raw or '').strip()
    try:
        data = json.loads(cleaned)
    except ValueError as e:
        raise ParseError(str(e)) from e
    if not isinstance(data, dict):
        raise ParseError('expected a JSON object')
    post = {
        'title': _text(data.get('title')) or 'Untitled',
        'meta_description': _text(data.get('meta_description')),
        'seo_keywords': _text(data.get('seo_keywords')),
        'summary': _text(data.get('summary')),
        'content_html': _text(data.get('content_html')),
    }
    return post


def _text(value):
    if value is None:
        return ''
    if isinstance(value, list):
        return ', '.join(str(v) for v in value)
    return str(value).strip()


def sanitize_html(html):
    if not html:
        return ''
    soup = BeautifulSoup(html, 'html.parser')
    for el in soup.find_all(DROPPED_TAGS):
        el.decompose()
    return bleach.clean(str(soup), tags=ALLOWED_TAGS, attributes={}, strip=True, strip_comments=True)


def generate(cfg, transcript, model_label=None):
    label = resolve_model_label(cfg, model_label)
    log.info('calling %s (%s) with %d chars of transcript', label, cfg.get('OPENAI_MODEL'), len(transcript))
    raw = call_provider(cfg, build_messages(transcript))
    log.info('provider response received (%d chars)', len(raw))
    try:
        post = parse_response(raw)
    except ParseError:
        log.error('could not parse provider response: %r', raw[:500])
        raise
    post['content_html'] = sanitize_html(post['content_html'])
    post['ai_model'] = label
    return post
