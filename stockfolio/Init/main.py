from typing import Optional

from flask import Flask
from werkzeug.exceptions import HTTPException

from stockfolio.config import DEFAULT_JWT_SECRET
from stockfolio.extensions import db, jwt, bcrypt, cors
from stockfolio.Store.PortfolioStore import PortfolioStore
from stockfolio.Utils.Errors import StockfolioError
from stockfolio.Utils.Responses import error_response

# Import the Blueprints
from stockfolio.Services.AuthenticationService import auth_bp
from stockfolio.Services.HealthService import health_bp
from stockfolio.Services.NoteService import notes_bp
from stockfolio.Services.StockService import stocks_bp

API_PREFIX = "/api"


def create_app(config_name: str = "DevelopmentConfig", overrides: Optional[dict] = None) -> Flask:

    app = Flask(__name__)
    app.config.from_object(f"stockfolio.config.{config_name}")
    if overrides:
        app.config.update(overrides)

    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Initialize extensions
    jwt.init_app(app)
    bcrypt.init_app(app)
    cors.init_app(app)

    store = PortfolioStore(db)
    store.connect(app)
    app.logger.info(f"Connected to {app.config['SQLALCHEMY_DATABASE_URI']}")

    if app.config["JWT_SECRET_KEY"] == DEFAULT_JWT_SECRET and not (app.debug or app.testing):
        app.logger.warning("JWT_SECRET_KEY is the development default; set it in the environment")

    # Register blueprints
    for blueprint in (auth_bp, stocks_bp, notes_bp, health_bp):
        app.register_blueprint(blueprint, url_prefix=API_PREFIX + (blueprint.url_prefix or ""))

    register_error_handlers(app)

    return app


def register_error_handlers(app: Flask):

    @app.errorhandler(StockfolioError)
    def _domain_error(e):
        return error_response(str(e), e.status_code)

    @app.errorhandler(HTTPException)
    def _http_error(e):
        return error_response(e.description, e.code)

    @app.errorhandler(Exception)
    def _unhandled(e):
        app.logger.error(f"Unhandled error: {str(e)}", exc_info=e)
        return error_response("Internal server error", 500)
