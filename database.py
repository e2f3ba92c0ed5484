from __future__ import annotations

from typing import Any, Dict, List, NamedTuple, Optional, Sequence

import MySQLdb
from flask import Flask
from flask_mysqldb import MySQL


class StoreError(Exception):
	"""Any failure talking to the relational store."""


class WriteResult(NamedTuple):
	lastrowid: Optional[int]
	rowcount: int


def _fetchone_dict(cursor) -> Optional[Dict[str, Any]]:
	row = cursor.fetchone()
	if row is None:
		return None
	if isinstance(row, dict):
		return row
	# MySQLdb returns tuples unless MYSQL_CURSORCLASS is DictCursor
	desc = [col[0] for col in cursor.description]
	return dict(zip(desc, row))


def _fetchall_dict(cursor) -> List[Dict[str, Any]]:
	rows = cursor.fetchall() or []
	if rows and isinstance(rows[0], dict):
		return list(rows)
	desc = [col[0] for col in cursor.description]
	return [dict(zip(desc, r)) for r in rows]


class Database:
	"""Data access shim handed to every blueprint.

	Wraps the Flask-MySQLdb extension, so a connection is opened lazily per
	application context and closed on teardown. Every driver failure is
	re-raised as :class:`StoreError`.
	"""

	errors: tuple = (MySQLdb.Error,)

	def __init__(self, mysql: Optional[MySQL] = None) -> None:
		self.mysql = mysql or MySQL()

	def init_app(self, app: Flask) -> None:
		self.mysql.init_app(app)

	def connection(self):
		conn = self.mysql.connection
		if conn is None:
			raise StoreError("No database connection outside an application context")
		return conn

	def _execute(self, cursor, sql: str, params: Sequence[Any]) -> None:
		cursor.execute(sql, tuple(params))

	def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
		try:
			cur = self.connection().cursor()
			self._execute(cur, sql, params)
			return _fetchall_dict(cur)
		except self.errors as exc:
			raise StoreError(str(exc)) from exc

	def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[Dict[str, Any]]:
		try:
			cur = self.connection().cursor()
			self._execute(cur, sql, params)
			return _fetchone_dict(cur)
		except self.errors as exc:
			raise StoreError(str(exc)) from exc

	def execute(self, sql: str, params: Sequence[Any] = ()) -> WriteResult:
		try:
			conn = self.connection()
			cur = conn.cursor()
			self._execute(cur, sql, params)
			conn.commit()
			return WriteResult(cur.lastrowid, cur.rowcount)
		except self.errors as exc:
			raise StoreError(str(exc)) from exc
