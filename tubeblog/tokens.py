"""Signed, self-expiring tokens for email verification and login sessions."""
import logging

from itsdangerous import BadData, URLSafeTimedSerializer

log = logging.getLogger(__name__)

EMAIL_VERIFY = 'email-verify'
SESSION = 'session'

TTLS = {
    EMAIL_VERIFY: 24 * 60 * 60,
    SESSION: 7 * 24 * 60 * 60,
}


def _serializer(secret):
    return URLSafeTimedSerializer(secret)


def issue(secret, user_id, purpose, email=None):
    if purpose not in TTLS:
        raise ValueError(f'unknown token purpose: {purpose}')
    return _serializer(secret).dumps({'uid': user_id, 'email': email}, salt=purpose)


def verify(secret, token, purpose, max_age=None):
    """Return the user id carried by ``token`` or None.

    Expired, forged, wrong-purpose and garbled tokens all come back as None.
    """
    if not token or purpose not in TTLS:
        return None
    try:
        data = _serializer(secret).loads(token, salt=purpose, max_age=max_age or TTLS[purpose])
    except BadData as e:
        log.info('rejected %s token: %s', purpose, e.__class__.__name__)
        return None
    if not isinstance(data, dict):
        return None
    uid = data.get('uid')
    if isinstance(uid, bool) or not isinstance(uid, int):
        return None
    return uid
