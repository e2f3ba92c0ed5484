from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Any, Dict

import dicttoxml
from flask import Response, current_app, jsonify, make_response, request
from werkzeug.exceptions import BadRequest

from database import StoreError


FORMATS = {"json", "xml"}


def get_format(*, strict: bool = True) -> str:
	fmt = (request.args.get("format") or "json").strip().lower()
	if fmt not in FORMATS:
		if not strict:
			return "json"
		raise BadRequest("format must be 'json' or 'xml'")
	return fmt


def format_suffix() -> str:
	fmt = request.args.get("format")
	if fmt:
		return f"?format={fmt}"
	return ""


def to_plain(value: Any) -> Any:
	"""Turn MySQL column values into JSON/XML friendly ones."""
	if isinstance(value, dict):
		return {k: to_plain(v) for k, v in value.items()}
	if isinstance(value, (list, tuple)):
		return [to_plain(v) for v in value]
	if isinstance(value, (dt.date, dt.datetime)):
		return value.isoformat()
	if isinstance(value, Decimal):
		return float(value)
	return value


def _to_xml(payload: Any, root: str = "response") -> bytes:
	# dicttoxml wraps list members in <item>; keep type attributes out
	return dicttoxml.dicttoxml(payload, custom_root=root, attr_type=False)


def api_response(payload: Any, status: int = 200, *, root: str = "response", strict: bool = True) -> Response:
	payload = to_plain(payload)
	fmt = get_format(strict=strict)
	if fmt == "xml":
		resp = make_response(_to_xml(payload, root=root), status)
		resp.headers["Content-Type"] = "application/xml; charset=utf-8"
		return resp
	return make_response(jsonify(payload), status)


def error_response(message: str, status: int) -> Response:
	payload: Dict[str, Any] = {"error": message, "status": status}
	# never fail twice: an unknown ?format= falls back to JSON here
	return api_response(payload, status=status, root="error", strict=False)


def handle_store_error(exc: StoreError, message: str = "Error ejecutando la consulta") -> Response:
	current_app.logger.error("%s %s failed: %s", request.method, request.path, exc, exc_info=exc)
	return error_response(message, 500)


def not_found(message: str = "Not found") -> Response:
	return error_response(message, 404)
