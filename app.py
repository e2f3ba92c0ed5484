from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from flask import Flask, Response, request
from werkzeug.exceptions import BadRequest, HTTPException, NotFound

from config import Config
from database import Database
from facturaciones import facturaciones_blueprint
from resources import blueprints
from responses import get_format, api_response, error_response
from usuarios import register_cli, usuarios_blueprint


ENV_KEYS = {
	"MYSQL_USER": str,
	"MYSQL_PASSWORD": str,
	"MYSQL_HOST": str,
	"MYSQL_DB": str,
	"MYSQL_PORT": int,
	"PORT": int,
	"LOG_LEVEL": str,
	"ALLOW_PLAINTEXT_PASSWORDS": lambda v: v.lower() in ("1", "true", "yes"),
}


def create_app(overrides: Optional[Dict[str, Any]] = None, database: Optional[Database] = None) -> Flask:
	app = Flask(__name__)
	app.config.from_object(Config)

	# Config class attributes are evaluated at import time; env vars read now win.
	for name, cast in ENV_KEYS.items():
		value = os.getenv(name)
		if value is not None:
			app.config[name] = cast(value)
	if overrides:
		app.config.update(overrides)

	app.logger.setLevel(getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO))

	db = database or Database()
	db.init_app(app)
	app.extensions["database"] = db

	for bp in blueprints(db):
		app.register_blueprint(bp)
	app.register_blueprint(facturaciones_blueprint(db))
	app.register_blueprint(usuarios_blueprint(db))
	register_cli(app, db)

	@app.before_request
	def _check_format() -> None:
		get_format()

	@app.after_request
	def _log_request(resp: Response) -> Response:
		app.logger.debug("%s %s -> %s", request.method, request.full_path.rstrip("?"), resp.status_code)
		return resp

	@app.get("/health")
	def health() -> Response:
		return api_response({"status": "ok"})

	# -------------------------
	# Consistent JSON/XML errors
	# -------------------------
	@app.errorhandler(BadRequest)
	def _bad_request(err: BadRequest):
		return error_response(str(err.description or "Bad request"), 400)

	@app.errorhandler(NotFound)
	def _not_found(err: NotFound):
		return error_response("Not found", 404)

	@app.errorhandler(HTTPException)
	def _http_error(err: HTTPException):
		return error_response(err.name, err.code or 500)

	@app.errorhandler(Exception)
	def _unhandled(err: Exception):
		app.logger.exception("Unhandled error on %s %s", request.method, request.path)
		return error_response("Internal server error", 500)

	return app


app = create_app()


if __name__ == "__main__":
	app.run(host="0.0.0.0", port=app.config["PORT"], debug=True)
