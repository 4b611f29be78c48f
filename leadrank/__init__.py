"""
Flask application factory.

Creates and configures the app and registers the ranking, leads and health
blueprints. Schema is managed by Alembic; create_app() never creates tables.
"""
from flask import Flask


def create_app():
    """Create and configure the Flask application."""
    from leadrank.logging_config import configure_logging

    app = Flask(__name__)

    configure_logging(app)

    app.json.sort_keys = False

    from leadrank.routes.ranking import bp as ranking_bp
    from leadrank.routes.leads import bp as leads_bp
    from leadrank.routes.health import bp as health_bp

    app.register_blueprint(ranking_bp)
    app.register_blueprint(leads_bp)
    app.register_blueprint(health_bp)

    # Circuit breaker for the LLM endpoint
    from leadrank.extensions import redis_client
    from leadrank.services.circuit_breaker import init_breakers
    init_breakers(redis_client)

    # Import models so Base.metadata knows about them
    from leadrank.database import init_models
    init_models()

    return app
