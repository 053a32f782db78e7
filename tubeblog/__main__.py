import logging

from . import create_app

log = logging.getLogger('tubeblog')


def main():
    app = create_app()
    cfg = app.config
    log.info('server running at http://%s:%s', cfg['HOST'], cfg['PORT'])
    log.info('email notifications: %s', cfg['MAIL_FROM'] or 'not configured')
    log.info('AI provider: %s', cfg['AI_PROVIDER'])
    log.info('environment: %s', cfg['APP_ENV'])
    app.run(host=cfg['HOST'], port=cfg['PORT'], debug=cfg['APP_ENV'] == 'development', threaded=True)


if __name__ == '__main__':
    main()
