import re
import logging

import requests
from youtube_transcript_api import CouldNotRetrieveTranscript, YouTubeTranscriptApi

log = logging.getLogger(__name__)

MAX_CHARS = 10000
MIN_PASTED_CHARS = 20

VIDEO_ID_PATTERNS = (
    re.compile(r'[?&]v=([0-9A-Za-z_-]{11})'),
    re.compile(r'youtu\.be/([0-9A-Za-z_-]{11})'),
    re.compile(r'youtube\.com/shorts/([0-9A-Za-z_-]{11})'),
)


class TranscriptError(Exception):
    """Input cannot be turned into transcript text."""


class NoCaptionsError(TranscriptError):
    pass


def extract_video_id(url):
    if not url:
        return None
    for pattern in VIDEO_ID_PATTERNS:
        m = pattern.search(url)
        if m:
            return m.group(1)
    return None


def fetch_captions(video_id):
    try:
        fetched = YouTubeTranscriptApi().fetch(video_id)
    except (CouldNotRetrieveTranscript, requests.RequestException) as e:
        log.error('captions unavailable for %s: %s', video_id, e.__class__.__name__)
        raise NoCaptionsError(video_id) from e
    text = ' '.join(s.text.strip() for s in fetched if s.text and s.text.strip())
    if not text:
        raise NoCaptionsError(video_id)
    log.info('fetched captions for %s (%d chars)', video_id, len(text))
    return text


def truncate(text, limit=MAX_CHARS):
    if len(text) > limit:
        return text[:limit] + '...'
    return text


def acquire(youtube_url=None, pasted=None):
    """Resolve request input to ``(text, source_url)``.

    Pasted text wins over the URL. ``source_url`` is None unless the
    captions were actually fetched from the URL.
    """
    pasted = str(pasted or '').strip()
    url = str(youtube_url or '').strip()
    if pasted:
        if len(pasted) < MIN_PASTED_CHARS:
            raise TranscriptError(
                f'Please paste a transcript with enough text (at least {MIN_PASTED_CHARS} characters).'
            )
        return truncate(pasted), None
    if not url:
        raise TranscriptError('A YouTube URL or a pasted transcript is required')
    video_id = extract_video_id(url)
    if not video_id:
        raise TranscriptError('Invalid YouTube URL format')
    return truncate(fetch_captions(video_id)), url
