from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix
from marshmallow import ValidationError
from flask_smorest import Api
from flask_limiter.errors import RateLimitExceeded

from .utils.extensions import limiter
from .utils.logger import Log, init_logging
from .extensions import db, redis_connection, cors

from .config import load_config
from .routes import register_routes
from .models.order_model import InvalidStatusTransition
from .models.product_model import DuplicateProductCodeError
from .services.auth_service import AuthError
from .utils.plan.capability_enforcer import PlanLimitError
from .utils.tenant_path import StoragePathError
from .utils import error_handlers as handlers

ERROR_HANDLERS = [
    (PermissionError, handlers.handle_permission_error),
    (ValidationError, handlers.handle_validation_error),
    (TypeError, handlers.handle_type_error),
    (ValueError, handlers.handle_value_error),
    (RateLimitExceeded, handlers.handle_rate_limit),
    (AuthError, handlers.handle_auth_error),
    (StoragePathError, handlers.handle_storage_path_error),
    (PlanLimitError, handlers.handle_plan_limit_error),
    (DuplicateProductCodeError, handlers.handle_duplicate_product_code),
    (InvalidStatusTransition, handlers.handle_invalid_status_transition),
]


def create_app(config_name=None, database=None, redis=None):
    """Build the OrderFlow API. ``database``/``redis`` replace the configured connections."""
    app = Flask(__name__)
    # Behind one reverse proxy: trust its X-Forwarded-* headers for client IP and scheme
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1, x_prefix=1)

    load_config(app, config_name)
    init_logging(app)

    api = Api(app)

    db.init_app(app, database)
    redis_connection.init_app(app, redis)
    cors.init_app(app, origins=app.config.get("ALLOWED_ORIGINS") or "*")
    limiter.init_app(app)

    for exception, handler in ERROR_HANDLERS:
        app.register_error_handler(exception, handler)

    register_routes(app, api)
    Log.info(f"[__init__.py][create_app] {app.config['API_TITLE']} ready ({config_name or 'env'})")

    return app
