"""
WordRun Server - Main Entry Point

Builds the services and starts the Flask-SocketIO application.
"""

import os

from wordrun import create_app
from wordrun.config import config
from wordrun.utils.game_logger import game_logger


def main():
    """Main function to initialize services and start the server."""
    config_class = config.get(os.getenv('FLASK_ENV', 'default'), config['default'])
    try:
        print("Creating Flask application...")
        app, socketio = create_app(config_class)
        services = app.services
        print("✓ Flask application created successfully")

        storage = 'MongoDB' if services.stores.client is not None else 'in-memory'
        print(f"✓ Storage backend: {storage}")
        print(f"✓ Word pool loaded: {services.solo_runs.total_words()} words")

        game_logger.logger.info(f"WordRun Server starting ({storage} storage)")

        print(f"\nStarting WordRun Server on {config_class.HOST}:{config_class.PORT}")
        print(f"Debug mode: {config_class.DEBUG}")
        print("=" * 50)

        socketio.run(app, host=config_class.HOST, port=config_class.PORT, debug=config_class.DEBUG)

    except KeyboardInterrupt:
        print("\nServer shutting down...")
        game_logger.logger.info("WordRun Server shutting down (KeyboardInterrupt)")
    except Exception as e:
        print(f"Error starting server: {e}")
        game_logger.logger.error(f"Error starting server: {e}")
        raise


if __name__ == '__main__':
    main()
