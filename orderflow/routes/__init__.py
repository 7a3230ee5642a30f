from ..resources import (
    blp_auth,
    blp_business,
    blp_customer,
    blp_product,
    blp_order,
    blp_admin,
)


def register_routes(app, api):
    blueprints = [
        blp_auth,
        blp_business,
        blp_customer,
        blp_product,
        blp_order,
        blp_admin,
    ]

    for blueprint in blueprints:
        api.register_blueprint(blueprint, url_prefix="/api/v1")
