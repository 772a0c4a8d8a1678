"""Local Flask editor for the store inventory.

- Products are kept in the JSON inventory managed by :mod:`storelib`; every
  add or remove is written through to disk immediately.
- JSON endpoints serve scripts and the browser; the ``/products/form`` and
  ``/products/<index>/delete`` endpoints accept plain HTML form posts from the
  page rendered at ``/``.
- Products are addressed by their position in the catalog. Positions shift
  after a removal, so clients should re-list before removing again.
"""

from __future__ import annotations

import atexit
import logging
import threading
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Optional

from flask import (
    Flask,
    flash,
    jsonify,
    redirect,
    render_template_string,
    request,
    url_for,
)
from flask_cors import CORS
from flask_talisman import Talisman
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from storelib import (
    IndexOutOfRange,
    InventoryStore,
    PerishableRecord,
    Record,
    RecordKind,
    StandardRecord,
    StoreError,
    load_store_config,
    total_value,
)

BASE_DIR = Path(__file__).resolve().parent

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------
CONFIG = load_store_config(BASE_DIR)

# ---------------------------------------------------------------------------
# Flask app
# ---------------------------------------------------------------------------
app = Flask(__name__)
app.config.update(
    SECRET_KEY=CONFIG.secret_key,
    SESSION_COOKIE_SAMESITE="Lax",
)
CORS(app, resources={r"/*": {"origins": list(CONFIG.allowed_origins)}})
Talisman(
    app,
    content_security_policy=None,
    force_https=False,
    session_cookie_secure=False,
    frame_options="DENY",
)

# ---------------------------------------------------------------------------
# Store handle
# ---------------------------------------------------------------------------
_STORE: Optional[InventoryStore] = None
_STORE_LOCK = threading.Lock()


def get_store() -> InventoryStore:
    """Return the editor's store, building and loading it on first use."""
    global _STORE
    if _STORE is None:
        with _STORE_LOCK:
            if _STORE is None:
                store = InventoryStore.from_config(CONFIG)
                store.initialize()
                _STORE = store
    return _STORE


def use_store(store: InventoryStore) -> None:
    """Install a store built by the caller as the editor's handle."""
    global _STORE
    with _STORE_LOCK:
        _STORE = store


# ---------------------------------------------------------------------------
# Payload validation
# ---------------------------------------------------------------------------
class ProductPayload(BaseModel):
    """Schema for validating new product payloads."""

    model_config = ConfigDict(populate_by_name=True)

    type: RecordKind = RecordKind.STANDARD
    name: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(..., ge=0)
    discount: Decimal = Field(Decimal("0"), ge=0, le=1)
    expiration_date: Optional[date] = Field(None, alias="expirationDate")

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value

    @model_validator(mode="after")
    def require_expiration(self) -> "ProductPayload":
        if self.type is RecordKind.PERISHABLE and self.expiration_date is None:
            raise ValueError("expirationDate is required for perishable products")
        return self

    def to_record(self) -> Record:
        if self.type is RecordKind.PERISHABLE:
            return PerishableRecord(self.name, self.price, self.quantity, self.expiration_date, self.discount)
        return StandardRecord(self.name, self.price, self.quantity, self.discount)


def _error_messages(err: ValidationError) -> list[dict]:
    return err.errors(include_url=False, include_context=False, include_input=False)


def product_json(index: int, record: Record) -> dict:
    doc = {
        "index": index,
        "type": record.kind.value,
        "name": record.name,
        "price": str(record.unit_price),
        "quantity": record.quantity,
        "discount": str(record.discount_rate),
        "total_value": str(total_value(record)),
    }
    if isinstance(record, PerishableRecord):
        doc["expirationDate"] = record.expiration_date.isoformat()
    return doc


# ---------------------------------------------------------------------------
# Routes: JSON
# ---------------------------------------------------------------------------
@app.route("/products", methods=["GET"])
def get_products():
    records = get_store().list()
    return jsonify([product_json(idx, record) for idx, record in enumerate(records)])


@app.route("/products/search", methods=["GET"])
def search_product():
    name = request.args.get("name", "").strip()
    if not name:
        return jsonify({"error": "name is required"}), 400
    store = get_store()
    records = store.list()
    for idx, record in enumerate(records):
        if record.name.casefold() == name.casefold():
            return jsonify(product_json(idx, record))
    return jsonify({"error": "Not found"}), 404


@app.route("/products/<int:index>", methods=["GET"])
def get_product(index: int):
    try:
        record = get_store().get(index)
    except IndexOutOfRange:
        return jsonify({"error": "Not found"}), 404
    return jsonify(product_json(index, record))


@app.route("/products", methods=["POST"])
def create_product():
    try:
        payload = request.get_json(force=True, silent=True)
        if not isinstance(payload, dict):
            payload = {}
        product = ProductPayload(**payload)
    except ValidationError as err:
        return jsonify({"error": _error_messages(err)}), 400
    try:
        index, outcome = get_store().append(product.to_record())
    except StoreError as exc:
        return jsonify({"error": str(exc)}), 500
    return jsonify({"index": index, "save": outcome.value}), 201


@app.route("/products/<int:index>", methods=["DELETE"])
def delete_product(index: int):
    try:
        get_store().remove_at(index)
    except IndexOutOfRange:
        return jsonify({"error": "Not found"}), 404
    except StoreError as exc:
        return jsonify({"error": str(exc)}), 500
    return jsonify({"ok": True})


@app.route("/summary", methods=["GET"])
def summary():
    return jsonify(get_store().aggregates().as_dict())


@app.route("/refresh", methods=["POST"])
def refresh():
    try:
        get_store().refresh_from_template(skip_confirmation=True)
    except StoreError as exc:
        if request.form:
            flash(f"Refresh failed: {exc}", "danger")
            return redirect(url_for("inventory_page"))
        return jsonify({"error": str(exc)}), 500
    if request.form:
        flash("Inventory reset to template", "success")
        return redirect(url_for("inventory_page"))
    return jsonify({"ok": True, "count": len(get_store())})


# ---------------------------------------------------------------------------
# Routes: HTML form editor
# ---------------------------------------------------------------------------
PAGE_TEMPLATE = """<!doctype html>
<html lang="en">
<head><meta charset="utf-8"><title>Store Inventory</title></head>
<body>
  <h1>Store Inventory</h1>
  {% for category, message in get_flashed_messages(with_categories=true) %}
    <p class="flash {{ category }}">{{ message }}</p>
  {% endfor %}
  {% if products %}
  <table>
    <tr><th>#</th><th>Name</th><th>Type</th><th>Price</th><th>Qty</th><th>Discount</th><th>Expires</th><th>Value</th><th></th></tr>
    {% for item in products %}
    <tr>
      <td>{{ item.index }}</td><td>{{ item.name }}</td><td>{{ item.type }}</td>
      <td>${{ item.price }}</td><td>{{ item.quantity }}</td><td>{{ item.discount }}</td>
      <td>{{ item.expirationDate or "" }}</td><td>${{ item.total_value }}</td>
      <td><form method="post" action="{{ url_for('form_delete_product', index=item.index) }}"><button>Remove</button></form></td>
    </tr>
    {% endfor %}
  </table>
  {% else %}
  <p>Inventory is empty.</p>
  {% endif %}
  <h2>Summary</h2>
  <ul>
    <li>Total Quantity: {{ totals.total_quantity }}</li>
    <li>Total Gross Price: ${{ totals.total_gross }}</li>
    <li>Total Price With Perishable Discount: ${{ totals.total_with_discount }}</li>
    <li>Total Price with additional 15% discount: ${{ totals.total_net }}</li>
  </ul>
  <h2>Add Product</h2>
  <form method="post" action="{{ url_for('form_create_product') }}">
    <input name="name" placeholder="Name">
    <input name="price" placeholder="Price">
    <input name="quantity" placeholder="Quantity">
    <input name="discount" placeholder="Discount (%)">
    <select name="type"><option value="non-perishable">Non-perishable</option><option value="perishable">Perishable</option></select>
    <input name="expirationDate" type="date">
    <button>Add</button>
  </form>
  <form method="post" action="{{ url_for('refresh') }}"><input type="hidden" name="confirm" value="yes"><button>Reset to template</button></form>
</body>
</html>
"""


@app.route("/")
def inventory_page():
    store = get_store()
    products = [product_json(idx, record) for idx, record in enumerate(store.list())]
    return render_template_string(PAGE_TEMPLATE, products=products, totals=store.aggregates().as_dict())


@app.route("/products/form", methods=["POST"])
def form_create_product():
    form_data = {
        "type": request.form.get("type") or RecordKind.STANDARD.value,
        "name": request.form.get("name", ""),
        "price": request.form.get("price"),
        "quantity": request.form.get("quantity"),
        "expirationDate": request.form.get("expirationDate") or None,
    }
    try:
        percent = request.form.get("discount") or "0"
        form_data["discount"] = Decimal(percent.strip()) / 100
        product = ProductPayload(**form_data)
    except (ValidationError, ArithmeticError) as err:
        if isinstance(err, ValidationError):
            message = "; ".join(e["msg"] for e in err.errors())
        else:
            message = "discount must be a number"
        flash(f"Unable to add product: {message}", "danger")
        return redirect(url_for("inventory_page"))
    try:
        get_store().add(product.to_record())
    except StoreError as exc:
        flash(f"Unable to add product: {exc}", "danger")
        return redirect(url_for("inventory_page"))
    flash("Product added", "success")
    return redirect(url_for("inventory_page"))


@app.route("/products/<int:index>/delete", methods=["POST"])
def form_delete_product(index: int):
    try:
        get_store().remove_at(index)
    except IndexOutOfRange:
        flash("Product not found", "warning")
    except StoreError as exc:
        flash(f"Unable to remove product: {exc}", "danger")
    else:
        flash("Product removed", "success")
    return redirect(url_for("inventory_page"))


# ---------------------------------------------------------------------------
# Security headers
# ---------------------------------------------------------------------------
@app.after_request
def secure_headers(resp):
    resp.headers["X-Content-Type-Options"] = "nosniff"
    resp.headers["X-Frame-Options"] = "DENY"
    return resp


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------
def main() -> None:
    logging.basicConfig(level=CONFIG.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    store = InventoryStore.from_config(CONFIG)
    store.initialize()
    use_store(store)
    atexit.register(store.flush_and_close)
    app.run(host=CONFIG.editor_host, port=CONFIG.editor_port)


if __name__ == "__main__":
    main()
