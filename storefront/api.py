"""Admin API endpoints over the catalog, inventory and content stores.

All routes live under ``/api``. The stores come from
``current_app.extensions["storefront"]`` (see ``storefront.app.create_app``).
Validation and parse errors become 400 responses, missing products 404.
"""

from typing import Any, Dict, Tuple

from flask import Blueprint, Response, current_app, jsonify, request

from storefront.config import ITEMS_PER_PAGE, PING_MESSAGE
from storefront.errors import NotFoundError, ParseError, ValidationError
from storefront.query import ALL_CATEGORIES, search_products
from storefront.services import Storefront

__all__ = ["api"]

api = Blueprint("api", __name__, url_prefix="/api")


def _services() -> Storefront:
    return current_app.extensions["storefront"]


def _flag(name: str) -> bool:
    return request.args.get(name, "").lower() in ("1", "true", "yes")


def _int_arg(name: str, default: int) -> int:
    value = request.args.get(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"Query parameter '{name}' must be an integer")


def _json_body() -> Any:
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationError("Request body must be JSON")
    return data


@api.errorhandler(ValidationError)
@api.errorhandler(ParseError)
def _bad_request(error: Exception) -> Tuple[Response, int]:
    return jsonify({"error": str(error), "kind": type(error).__name__}), 400


@api.errorhandler(NotFoundError)
def _not_found(error: NotFoundError) -> Tuple[Response, int]:
    return jsonify({"error": str(error), "kind": "NotFoundError"}), 404


# ---------- health ----------


@api.route("/ping", methods=["GET"])
def ping() -> Response:
    return jsonify({"message": PING_MESSAGE})


# ---------- products ----------


@api.route("/products", methods=["GET"])
def list_products() -> Response:
    """List merged products with optional search, filter, sort and paging."""
    catalog = _services().catalog
    products = catalog.get_products(include_hidden=_flag("include_hidden"))
    page = search_products(
        products,
        query=request.args.get("q", ""),
        category=request.args.get("category", ALL_CATEGORIES),
        sort_by=request.args.get("sort", "name"),
        page=_int_arg("page", 1),
        per_page=_int_arg("per_page", ITEMS_PER_PAGE),
    )
    return jsonify({
        "products": [p.to_dict() for p in page.items],
        "page": page.page,
        "total_pages": page.total_pages,
        "total": page.total,
        "version": catalog.version,
    })


@api.route("/products/<product_id>", methods=["GET"])
def get_product(product_id: str) -> Response:
    product = _services().catalog.get_product(product_id)
    if product is None:
        raise NotFoundError(f"No product with id '{product_id}'")
    data: Dict[str, Any] = product.to_dict()
    data["stock"] = _services().inventory.get_stock(product_id)
    return jsonify(data)


@api.route("/products", methods=["POST"])
def save_product() -> Tuple[Response, int]:
    body = _json_body()
    if not isinstance(body, dict):
        raise ValidationError("Product must be a JSON object")
    product = _services().catalog.upsert_product(body)
    return jsonify(product.to_dict()), 200


@api.route("/products/<product_id>", methods=["PATCH"])
def update_product(product_id: str) -> Response:
    body = _json_body()
    if not isinstance(body, dict):
        raise ValidationError("Product must be a JSON object")
    product = _services().catalog.upsert_product({**body, "id": product_id})
    return jsonify(product.to_dict())


@api.route("/products/<product_id>", methods=["DELETE"])
def delete_product(product_id: str) -> Tuple[str, int]:
    _services().catalog.delete_product(product_id)
    return "", 204


@api.route("/products/<product_id>/hidden", methods=["POST"])
def set_hidden(product_id: str) -> Response:
    body = _json_body()
    hidden = body.get("hidden") if isinstance(body, dict) else None
    product = _services().catalog.set_hidden(product_id, hidden)
    return jsonify(product.to_dict())


@api.route("/products/<product_id>/duplicate", methods=["POST"])
def duplicate_product(product_id: str) -> Tuple[Response, int]:
    product = _services().catalog.duplicate_product(product_id)
    return jsonify(product.to_dict()), 201


@api.route("/categories", methods=["GET"])
def list_categories() -> Response:
    return jsonify({"categories": _services().catalog.list_categories()})


# ---------- overrides import/export ----------


@api.route("/overrides", methods=["GET"])
def export_overrides() -> Response:
    text = _services().catalog.export_overrides()
    return Response(
        text,
        mimetype="application/json",
        headers={"Content-Disposition": "attachment; filename=catalog_overrides.json"},
    )


@api.route("/import-products", methods=["POST"])
def import_products() -> Response:
    """Replace all overrides with the posted export document."""
    count = _services().catalog.import_overrides(request.get_data())
    return jsonify({"imported": count})


@api.route("/overrides", methods=["DELETE"])
def clear_overrides() -> Tuple[str, int]:
    _services().catalog.clear_overrides()
    return "", 204


# ---------- inventory ----------


@api.route("/inventory", methods=["GET"])
def export_inventory() -> Response:
    return Response(_services().inventory.export_inventory(), mimetype="application/json")


@api.route("/inventory/<product_id>", methods=["GET"])
def get_stock(product_id: str) -> Response:
    return jsonify({"id": product_id, "stock": _services().inventory.get_stock(product_id)})


@api.route("/inventory/<product_id>", methods=["PUT"])
def set_stock(product_id: str) -> Response:
    body = _json_body()
    stock = body.get("stock") if isinstance(body, dict) else None
    _services().inventory.set_stock(product_id, stock)
    return jsonify({"id": product_id, "stock": stock})


@api.route("/inventory/import", methods=["POST"])
def import_inventory() -> Response:
    count = _services().inventory.import_inventory(request.get_data())
    return jsonify({"imported": count})


@api.route("/inventory", methods=["DELETE"])
def reset_inventory() -> Tuple[str, int]:
    _services().inventory.reset_inventory()
    return "", 204


# ---------- site content ----------


@api.route("/content", methods=["GET"])
def get_content() -> Response:
    return jsonify(_services().content.resolved_content())


@api.route("/content", methods=["PUT"])
def save_content() -> Response:
    body = _json_body()
    if not isinstance(body, dict):
        raise ValidationError("Content must be a JSON object")
    _services().content.save_content(body)
    return jsonify(_services().content.resolved_content())
