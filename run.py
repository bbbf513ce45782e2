#!/usr/bin/env python3
"""
Development server runner
"""
import os


def main():
    debug_env = os.getenv('FLASK_DEBUG', os.getenv('DEBUG', '0')).strip().lower()
    debug_enabled = debug_env in ('1', 'true', 'yes', 'on')
    reloader_env = os.getenv('USE_RELOADER')
    use_reloader = debug_enabled if reloader_env is None else reloader_env.strip().lower() in ('1', 'true', 'yes', 'on')
    host = os.getenv('HOST', '127.0.0.1')
    port = int(os.getenv('PORT', '5000'))

    from bookkeep import create_app
    app = create_app()

    app.logger.info('Server starting on http://%s:%s (debug=%s, reloader=%s)',
                    host, port, 'ON' if debug_enabled else 'OFF', 'ON' if use_reloader else 'OFF')
    app.run(host=host, port=port, debug=debug_enabled, use_reloader=use_reloader)


if __name__ == '__main__':
    main()
