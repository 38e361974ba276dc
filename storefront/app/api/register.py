from flask import Flask

from storefront.modules.basket.routes import api_bp as basket_api_bp
from storefront.modules.catalog.api import bp as catalog_api_bp


def register_api_blueprints(app: Flask) -> None:
    app.register_blueprint(catalog_api_bp, url_prefix="/api")
    app.register_blueprint(basket_api_bp, url_prefix="/api")

    # Root API document
    @app.get("/api")
    def api_index():
        return {
            "name": "Storefront API",
            "version": "0.1.0",
            "endpoints": {
                "catalog": ["/catalog/stock"],
                "basket": ["/basket"],
            },
        }, 200
