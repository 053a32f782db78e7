import os
import logging
from pathlib import Path

from dotenv import load_dotenv

log = logging.getLogger(__name__)

ROOT_DIR = Path(__file__).resolve().parent.parent

DEFAULTS = {
    'HOST': '0.0.0.0',
    'PORT': 3000,
    'DATABASE_FILE': './db/database.sqlite',
    'SESSION_SECRET': '',
    'SESSION_COOKIE_NAME': 'sid',
    'SMTP_HOST': '',
    'SMTP_PORT': 587,
    'SMTP_USER': '',
    'SMTP_PASS': '',
    'MAIL_FROM': '',
    'OPENAI_API_KEY': '',
    'OPENAI_MODEL': 'gpt-4o-mini',
    'OPENAI_API_URL': 'https://api.openai.com/v1/chat/completions',
    'OPENAI_TIMEOUT': 60,
    'AI_PROVIDER': 'OpenAI',
    'APP_ENV': 'development',
    'LOG_LEVEL': 'INFO',
}

INT_KEYS = ('PORT', 'SMTP_PORT', 'OPENAI_TIMEOUT')


def _to_int(key, value):
    try:
        return int(value)
    except (TypeError, ValueError):
        log.warning('%s=%r is not a number, using %s', key, value, DEFAULTS[key])
        return DEFAULTS[key]


def load_config(overrides=None):
    """Collect settings from ``.env``, the environment and ``overrides``.

    Real environment variables win over ``.env`` values; ``overrides`` win
    over both.
    """
    load_dotenv(ROOT_DIR / '.env', override=False)
    cfg = {}
    for key, default in DEFAULTS.items():
        cfg[key] = os.environ.get(key, default)
    if not cfg['SESSION_SECRET']:
        cfg['SESSION_SECRET'] = os.environ.get('JWT_SECRET', '')
    cfg.update(overrides or {})
    for key in INT_KEYS:
        cfg[key] = _to_int(key, cfg[key])
    if not cfg['SESSION_SECRET']:
        log.warning('SESSION_SECRET is not set, falling back to an insecure development secret')
        cfg['SESSION_SECRET'] = 'dev-secret'
    cfg['SECRET_KEY'] = cfg['SESSION_SECRET']
    return cfg


def is_production(cfg):
    return (cfg.get('APP_ENV') or '').lower() == 'production'
