from __future__ import annotations

import hmac
from typing import Any, Dict, Optional

import click
from flask import Blueprint, Flask, Response, current_app, request
from werkzeug.security import check_password_hash, generate_password_hash

from database import Database, StoreError
from responses import api_response, error_response, handle_store_error


HASH_METHODS = ("scrypt", "pbkdf2")


def _is_password_hash(value: str) -> bool:
	# werkzeug format is "method$salt$hash"; clear-text like "pa$$word" can contain "$" too
	return value.count("$") >= 2 and value.split("$", 1)[0].split(":", 1)[0] in HASH_METHODS


def password_matches(stored: Optional[str], candidate: Optional[str], *, allow_plaintext: bool = False) -> bool:
	if not stored or candidate is None:
		return False
	if _is_password_hash(stored):
		try:
			return check_password_hash(stored, candidate)
		except ValueError:
			return False
	if allow_plaintext:
		return hmac.compare_digest(stored.encode(), candidate.encode())
	return False


def find_user(db: Database, usuario: Any, password: Any, *, allow_plaintext: bool = False) -> Optional[Dict[str, Any]]:
	if not isinstance(usuario, str) or not isinstance(password, str):
		return None
	for row in db.fetch_all("SELECT id, usuario, pass FROM usuarios WHERE usuario = %s ORDER BY id", (usuario,)):
		if password_matches(row["pass"], password, allow_plaintext=allow_plaintext):
			return {"id": row["id"], "usuario": row["usuario"]}
	return None


def create_user(db: Database, usuario: str, password: str) -> int:
	result = db.execute(
		"INSERT INTO usuarios (usuario, pass) VALUES (%s, %s)",
		(usuario, generate_password_hash(password)),
	)
	return result.lastrowid


def usuarios_blueprint(db: Database) -> Blueprint:
	bp = Blueprint("usuarios", __name__, url_prefix="/usuarios")

	@bp.post("/", strict_slashes=False)
	def validate_user() -> Response:
		body = request.get_json(silent=True) or {}
		if not isinstance(body, dict):
			body = {}
		try:
			user = find_user(
				db,
				body.get("usuario"),
				body.get("pass"),
				allow_plaintext=current_app.config.get("ALLOW_PLAINTEXT_PASSWORDS", False),
			)
		except StoreError as e:
			return handle_store_error(e)
		if user is None:
			current_app.logger.info("Rejected credentials for usuario=%r", body.get("usuario"))
			return error_response("Usuario o contraseña incorrectos", 401)
		return api_response(user, root="usuario")

	return bp


def register_cli(app: Flask, db: Database) -> None:
	@app.cli.command("create-user")
	@click.argument("usuario")
	@click.password_option("--password", prompt="Contraseña")
	def create_user_command(usuario: str, password: str) -> None:
		"""Store USUARIO with a salted password hash."""
		try:
			user_id = create_user(db, usuario, password)
		except StoreError as e:
			raise click.ClickException(f"Could not create user: {e}")
		click.echo(f"Created user {usuario} with id {user_id}")
