from dotenv import load_dotenv
load_dotenv()

from tactics import create_app, socketio

app = create_app()

if __name__ == '__main__':
    # debug=True means the server will auto-reload when you save a file.
    # Only enabled for local development.
    import os
    debug = os.environ.get('FLASK_ENV') == 'development'
    socketio.run(app, debug=debug, host='0.0.0.0', port=5001,
                 allow_unsafe_werkzeug=debug)
