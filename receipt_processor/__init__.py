from flask import Flask

from .api import receipts_blueprint, register_error_handlers
from .config import DefaultConfig
from .log import configure_logging
from .service import ReceiptService
from .store import InMemoryReceiptStore


def create_app(config=None, store=None) -> Flask:
    """
    Builds the Flask application. Settings come from DefaultConfig, then any
    RECEIPTS_* environment variables, then the explicit config mapping. The
    store is created here unless one is injected, and lives as long as the app.
    """
    app = Flask(__name__)
    app.config.from_object(DefaultConfig)
    app.config.from_prefixed_env(prefix="RECEIPTS")
    if config:
        app.config.update(config)

    configure_logging(app.config["LOG_LEVEL"])

    if store is None:
        store = InMemoryReceiptStore()
    app.extensions["receipt_service"] = ReceiptService(
        store,
        duplicate_detection=app.config["DUPLICATE_DETECTION"],
    )

    app.register_blueprint(receipts_blueprint)
    register_error_handlers(app)
    return app
