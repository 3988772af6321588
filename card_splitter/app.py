"""
Главный Flask application
"""
import logging
import os

from flask import Flask

from card_splitter.core.config import AppConfig
from card_splitter.services.workflow_session import WorkflowSession
from card_splitter.web.routes import configure_routes
from card_splitter.utils.logger import setup_logging
from card_splitter.web.utils import EXTENSION_KEY

logger = logging.getLogger(__name__)


def create_app(config: AppConfig = None, session: WorkflowSession = None):
    """Создание Flask приложения со своей рабочей сессией"""
    config = config or AppConfig.from_env()

    app = Flask(__name__)
    app.secret_key = config.secret_key
    app.config['MAX_CONTENT_LENGTH'] = config.max_upload_size
    app.config['DEBUG'] = config.debug
    app.config['SETTINGS_FOLDER'] = config.settings_folder
    app.extensions[EXTENSION_KEY] = session or WorkflowSession()

    configure_routes(app)

    logger.info(f"{config.app_name} {config.version} initialized")
    return app


def main():
    config = AppConfig.from_env()
    setup_logging(config.log_folder, logging.DEBUG if config.debug else logging.INFO)
    app = create_app(config)

    # Хост и порт из переменных окружения
    host = os.getenv('FLASK_HOST', '0.0.0.0')
    port = int(os.getenv('FLASK_PORT', 5000))

    logger.info(f"Запуск {config.app_name} на {host}:{port}")
    app.run(host=host, port=port, debug=config.debug)


if __name__ == '__main__':
    main()
