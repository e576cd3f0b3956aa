"""Flask application factory for the Chart Audit service."""

import os
from flask import Flask

from .config import get_config


def create_app(config=None):
    """Create and configure the Flask application.

    Args:
        config: Optional configuration object or dict

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)

    # Load configuration
    if config is None:
        config = get_config()

    if isinstance(config, dict):
        app.config.update(config)
    else:
        app.config.from_object(config)

    # Initialize audit store, service and dispatcher
    from common.audit_store import AuditStore
    from audit_src.notifier import CommunicationDispatcher
    from audit_src.service import AuditService

    app.audit_store = AuditStore(db_path=app.config.get("AUDIT_DB_PATH"))
    app.audit_service = AuditService(store=app.audit_store)
    app.dispatcher = CommunicationDispatcher(store=app.audit_store)

    # Register blueprints
    from .routes.api import api_bp

    app.register_blueprint(api_bp, url_prefix="/api")

    return app


def run_dev_server():
    """Run development server."""
    app = create_app()
    app.run(
        host="0.0.0.0",
        port=int(os.environ.get("PORT", 5000)),
        debug=True,
    )


if __name__ == "__main__":
    run_dev_server()
