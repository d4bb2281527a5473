"""Flask app serving the storefront admin API.

Run locally with ``python -m storefront.app``.
"""

from typing import Any, Mapping, Optional

from flask import Flask

from storefront.api import api
from storefront.config import (
    BASE_CATALOG_PATH,
    DB_PATH,
    FLASK_DEBUG,
    FLASK_HOST,
    FLASK_PORT,
)
from storefront.services import Storefront, open_storefront

__all__ = ["create_app"]


def create_app(
    services: Optional[Storefront] = None,
    config: Optional[Mapping[str, Any]] = None,
) -> Flask:
    """Create the Flask app.

    Args:
        services: Stores to serve; opened from ``STOREFRONT_DB_PATH`` and
            ``STOREFRONT_BASE_CATALOG`` when omitted.
        config: Extra Flask config values (e.g. ``{"TESTING": True}``).
    """
    app = Flask(__name__)
    app.config.from_mapping(config or {})

    if services is None:
        services = open_storefront(
            db_path=app.config.get("STOREFRONT_DB_PATH", DB_PATH),
            base_catalog_path=app.config.get("STOREFRONT_BASE_CATALOG", BASE_CATALOG_PATH),
        )
    app.extensions["storefront"] = services
    app.register_blueprint(api)
    return app


if __name__ == "__main__":
    from storefront.logging_config import setup_logging

    setup_logging()
    create_app().run(host=FLASK_HOST, port=FLASK_PORT, debug=FLASK_DEBUG)
