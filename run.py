"""
Application entry point.

Usage:
    python run.py

Starts the bootstrap server on http://localhost:5000. Pages load
http://localhost:5000/runtime-config.js to learn the backend origins.
"""

from focusboard import create_app

app = create_app()

if __name__ == '__main__':
    print('\n  FocusBoard Runtime Bootstrap')
    print('  ============================')
    print(f"  Resource service: {app.config['API_BASE_URL'] or '(same origin)'}")
    print(f"  Identity service: {app.config['AUTH_API_BASE_URL'] or '(client default)'}")
    print('  URL: http://localhost:5000/runtime-config.js\n')

    app.run(
        host='127.0.0.1',
        port=5000,
        debug=True,
    )
