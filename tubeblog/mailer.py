import smtplib
import logging
from email.message import EmailMessage

from markupsafe import escape

log = logging.getLogger(__name__)

VERIFY_SUBJECT = 'Verify your email - AI Blog Generator'


class MailError(Exception):
    pass


def _verification_body(name, url):
    text = (
        f'Hi {name},\n\n'
        f'Please open the link below to verify your email address:\n{url}\n\n'
        'This link expires in 24 hours.\n'
    )
    html = (
        '<h2>Welcome to AI Blog Generator!</h2>'
        f'<p>Hi {escape(name)},</p>'
        '<p>Please click the link below to verify your email address:</p>'
        f'<p><a href="{url}">Verify Email</a></p>'
        f'<p>Or copy this link: {url}</p>'
        '<p>This link expires in 24 hours.</p>'
    )
    return text, html


def send_verification(cfg, name, email, url):
    host = cfg.get('SMTP_HOST')
    sender = cfg.get('MAIL_FROM') or cfg.get('SMTP_USER')
    if not host:
        log.warning('SMTP_HOST not configured, verification link for %s: %s', email, url)
        return False

    msg = EmailMessage()
    msg['Subject'] = VERIFY_SUBJECT
    msg['From'] = sender
    msg['To'] = email
    text, html = _verification_body(name, url)
    msg.set_content(text)
    msg.add_alternative(html, subtype='html')

    try:
        with smtplib.SMTP(host, cfg.get('SMTP_PORT') or 587, timeout=20) as smtp:
            smtp.ehlo()
            if smtp.has_extn('starttls'):
                smtp.starttls()
                smtp.ehlo()
            if cfg.get('SMTP_USER') and cfg.get('SMTP_PASS'):
                smtp.login(cfg['SMTP_USER'], cfg['SMTP_PASS'])
            smtp.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        raise MailError(str(e)) from e
    log.info('verification email sent to %s', email)
    return True
