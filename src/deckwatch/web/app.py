"""Flask app factory — creates and configures the attention API."""

from __future__ import annotations

from flask import Flask

from deckwatch.config import DeckwatchConfig
from deckwatch.transcript import TranscriptStore


def create_app(config: DeckwatchConfig) -> Flask:
    """Create the Flask app with config values and registered routes.

    Args:
        config: DeckwatchConfig with transcripts_dir, window sizes, etc.

    Returns:
        Configured Flask application.
    """
    app = Flask(__name__)

    app.config["DECKWATCH"] = config
    app.config["TRANSCRIPT_STORE"] = TranscriptStore.from_config(config)

    from deckwatch.web.routes import bp

    app.register_blueprint(bp)

    return app
