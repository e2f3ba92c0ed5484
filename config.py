import os

class Config:
	MYSQL_USER = os.getenv('MYSQL_USER', 'root')
	MYSQL_PASSWORD = os.getenv('MYSQL_PASSWORD', '')
	MYSQL_HOST = os.getenv('MYSQL_HOST', 'localhost')
	MYSQL_DB = os.getenv('MYSQL_DB', 'bd_analisis')
	MYSQL_PORT = int(os.getenv('MYSQL_PORT', 3306))
	MYSQL_CURSORCLASS = 'DictCursor'
	PORT = int(os.getenv('PORT', 3000))
	LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
	# Accept clear-text rows left in `usuarios` before passwords were hashed.
	ALLOW_PLAINTEXT_PASSWORDS = os.getenv('ALLOW_PLAINTEXT_PASSWORDS', '0').lower() in ('1', 'true', 'yes')
