"""Generic CRUD blueprints.

Each table the API exposes is described once by a :class:`Resource` and
turned into a blueprint by :func:`make_blueprint`. The statements are
single-table and parameterized; fields are forwarded as sent, so a missing
column is bound as NULL and left for the store to accept or reject.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from flask import Blueprint, Response, current_app, request

from database import Database, StoreError
from responses import api_response, format_suffix, handle_store_error, not_found


@dataclass(frozen=True)
class Resource:
	name: str
	table: str
	columns: Tuple[str, ...]
	not_found_message: str
	updated_message: str
	deleted_message: str
	id_column: str = "id"

	@property
	def select_sql(self) -> str:
		return f"SELECT {', '.join((self.id_column,) + self.columns)} FROM {self.table}"

	@property
	def insert_sql(self) -> str:
		placeholders = ", ".join(["%s"] * len(self.columns))
		return f"INSERT INTO {self.table} ({', '.join(self.columns)}) VALUES ({placeholders})"

	@property
	def update_sql(self) -> str:
		assignments = ", ".join(f"{c} = %s" for c in self.columns)
		return f"UPDATE {self.table} SET {assignments} WHERE {self.id_column} = %s"

	@property
	def delete_sql(self) -> str:
		return f"DELETE FROM {self.table} WHERE {self.id_column} = %s"

	def values(self, body: Dict[str, Any]) -> List[Any]:
		return [body.get(c) for c in self.columns]


PRODUCTOS = Resource(
	name="productos",
	table="productos",
	columns=("codigo", "descripcion", "proveedor", "marca", "color", "stock", "precio"),
	not_found_message="Producto no encontrado",
	updated_message="Producto actualizado exitosamente",
	deleted_message="Producto eliminado exitosamente",
)

PROVEEDORES = Resource(
	name="proveedores",
	table="proveedor",
	columns=("ruc", "nombre", "telefono", "direccion", "razon"),
	not_found_message="Proveedor no encontrado",
	updated_message="Proveedor actualizado exitosamente",
	deleted_message="Proveedor eliminado exitosamente",
)

CLIENTES = Resource(
	name="clientes",
	table="clientes",
	columns=("dpi", "nombre", "telefono", "direccion", "razon"),
	not_found_message="Cliente no encontrado",
	updated_message="Cliente actualizado exitosamente",
	deleted_message="Cliente eliminado exitosamente",
)

CONFIG = Resource(
	name="config",
	table="config",
	columns=("ruc", "nombre", "telefono", "direccion", "razon"),
	not_found_message="Configuración no encontrada",
	updated_message="Configuración actualizada exitosamente",
	deleted_message="Configuración eliminada exitosamente",
)

VENTAS = Resource(
	name="ventas",
	table="ventas",
	columns=("cliente", "vendedor", "total", "fecha"),
	not_found_message="Venta no encontrada",
	updated_message="Venta actualizada exitosamente",
	deleted_message="Venta eliminada exitosamente",
)

DETALLE = Resource(
	name="detalle",
	table="detalle",
	columns=("cod_pro", "cantidad", "precio", "id_venta"),
	not_found_message="Detalle no encontrado",
	updated_message="Detalle actualizado exitosamente",
	deleted_message="Detalle eliminado exitosamente",
)

RESOURCES = (PRODUCTOS, PROVEEDORES, CLIENTES, CONFIG, VENTAS, DETALLE)


def _json_body() -> Dict[str, Any]:
	body = request.get_json(silent=True)
	return body if isinstance(body, dict) else {}


def make_blueprint(resource: Resource, db: Database) -> Blueprint:
	bp = Blueprint(resource.name, __name__, url_prefix=f"/{resource.name}")

	@bp.get("/", strict_slashes=False)
	def list_rows() -> Response:
		try:
			rows = db.fetch_all(f"{resource.select_sql} ORDER BY {resource.id_column}")
			return api_response(rows)
		except StoreError as e:
			return handle_store_error(e)

	@bp.post("/", strict_slashes=False)
	def create_row() -> Response:
		body = _json_body()
		try:
			result = db.execute(resource.insert_sql, resource.values(body))
		except StoreError as e:
			return handle_store_error(e)
		payload = dict(body)
		payload[resource.id_column] = result.lastrowid
		resp = api_response(payload, status=201)
		resp.headers["Location"] = f"/{resource.name}/{result.lastrowid}" + format_suffix()
		return resp

	@bp.get("/<int:row_id>")
	def get_row(row_id: int) -> Response:
		try:
			row = db.fetch_one(f"{resource.select_sql} WHERE {resource.id_column} = %s", (row_id,))
		except StoreError as e:
			return handle_store_error(e)
		if not row:
			return not_found(resource.not_found_message)
		return api_response(row)

	@bp.put("/<int:row_id>")
	def update_row(row_id: int) -> Response:
		body = _json_body()
		try:
			result = db.execute(resource.update_sql, resource.values(body) + [row_id])
		except StoreError as e:
			return handle_store_error(e)
		if result.rowcount == 0:
			current_app.logger.info("PUT /%s/%s matched no rows", resource.name, row_id)
		return api_response(
			{"message": resource.updated_message, resource.id_column: row_id, "affected_rows": result.rowcount}
		)

	@bp.delete("/<int:row_id>")
	def delete_row(row_id: int) -> Response:
		try:
			result = db.execute(resource.delete_sql, (row_id,))
		except StoreError as e:
			return handle_store_error(e)
		return api_response(
			{"message": resource.deleted_message, resource.id_column: row_id, "affected_rows": result.rowcount}
		)

	return bp


def productos_blueprint(db: Database) -> Blueprint:
	bp = make_blueprint(PRODUCTOS, db)

	@bp.get("/codigo/<codigo>")
	def get_by_codigo(codigo: str) -> Response:
		try:
			row = db.fetch_one(f"{PRODUCTOS.select_sql} WHERE codigo = %s", (codigo,))
		except StoreError as e:
			return handle_store_error(e)
		if not row:
			return not_found(PRODUCTOS.not_found_message)
		return api_response(row)

	return bp


def ventas_blueprint(db: Database) -> Blueprint:
	bp = make_blueprint(VENTAS, db)

	@bp.get("/maximo-id")
	def maximo_id() -> Response:
		# Advisory only: two callers can read the same value. New sales get
		# their id from the insert itself (see create_row).
		current_app.logger.warning("GET /ventas/maximo-id is deprecated")
		try:
			row = db.fetch_one("SELECT COALESCE(MAX(id), 0) AS maximo_id_venta FROM ventas")
		except StoreError as e:
			return handle_store_error(e)
		resp = api_response({"maximo_id_venta": int(row["maximo_id_venta"]) if row else 0})
		resp.headers["Deprecation"] = "true"
		return resp

	return bp


def blueprints(db: Database) -> List[Blueprint]:
	bps = [productos_blueprint(db), ventas_blueprint(db)]
	bps.extend(make_blueprint(r, db) for r in (PROVEEDORES, CLIENTES, CONFIG, DETALLE))
	return bps
