from __future__ import annotations

from typing import Any, Dict, Iterable, List

from flask import Blueprint, Response

from database import Database, StoreError
from responses import api_response, handle_store_error


FACTURACIONES_SQL = """
	SELECT v.id AS venta_id, v.cliente, v.vendedor, v.total, v.fecha,
	       c.nombre AS cliente_nombre, c.dpi, d.cod_pro, d.cantidad, d.precio,
	       p.descripcion AS producto_descripcion, p.marca, p.color
	FROM ventas v
	JOIN clientes c ON v.cliente = c.id
	JOIN detalle d ON v.id = d.id_venta
	JOIN productos p ON d.cod_pro = p.codigo
	ORDER BY v.fecha DESC, v.id DESC, d.id
"""


def group_sales(rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
	"""Fold flat join rows into one document per sale.

	Sales keep the order in which they are first seen, so the ordering of
	the query carries through unchanged. Every row contributes one entry to
	its sale's ``detalles``.
	"""
	ventas: List[Dict[str, Any]] = []
	by_id: Dict[Any, Dict[str, Any]] = {}

	for row in rows:
		venta = by_id.get(row["venta_id"])
		if venta is None:
			venta = {
				"venta_id": row["venta_id"],
				"cliente": {
					"id": row["cliente"],
					"nombre": row["cliente_nombre"],
					"dpi": row["dpi"],
				},
				"vendedor": row["vendedor"],
				"total": row["total"],
				"fecha": row["fecha"],
				"detalles": [],
			}
			by_id[row["venta_id"]] = venta
			ventas.append(venta)

		venta["detalles"].append(
			{
				"cod_pro": row["cod_pro"],
				"cantidad": row["cantidad"],
				"precio": row["precio"],
				"producto_descripcion": row["producto_descripcion"],
				"marca": row["marca"],
				"color": row["color"],
			}
		)

	return ventas


def facturaciones_blueprint(db: Database) -> Blueprint:
	bp = Blueprint("facturaciones", __name__, url_prefix="/facturaciones")

	@bp.get("/", strict_slashes=False)
	def list_facturaciones() -> Response:
		try:
			rows = db.fetch_all(FACTURACIONES_SQL)
		except StoreError as e:
			return handle_store_error(e, "Error al obtener las ventas.")
		return api_response(group_sales(rows), root="ventas")

	return bp
