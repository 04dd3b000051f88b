"""
Constants for the Stock Tracker application.

This module defines all system-wide constants including:
- Application metadata
- Validation patterns and limits
- Report/export layout
- User-facing messages (Brazilian Portuguese, as shown in the app)
"""

import re
from decimal import Decimal
from typing import List

# ============================================================================
# Application Metadata
# ============================================================================

APP_NAME = "Stock Tracker"
APP_VERSION = "0.1.0"

# ============================================================================
# Validation Constants
# ============================================================================

MAX_NAME_LENGTH = 200

# Whole numbers only
QUANTITY_PATTERN = re.compile(r"^[0-9]+$")
SIGNED_INTEGER_PATTERN = re.compile(r"^[+-]?[0-9]+$")

# 99, 99.9, 99,99 (at most two fractional digits)
PRICE_PATTERN = re.compile(r"^[0-9]+([.,][0-9]{1,2})?$")
SIGNED_NUMBER_PATTERN = re.compile(r"^[+-]?[0-9]+([.,][0-9]+)?$")

# Accepted decimal separators for typed prices
DECIMAL_SEPARATORS = (".", ",")

# Largest value an SQLite INTEGER column holds
MAX_QUANTITY = 2**63 - 1
MAX_QUANTITY_DIGITS = len(str(MAX_QUANTITY))

# Prices are held to the cent
CURRENCY_QUANTUM = Decimal("0.01")

# Numeric(12, 2): ten whole digits, two fractional
MAX_PRICE = Decimal("9999999999.99")

# ============================================================================
# Database Constants
# ============================================================================

DATABASE_FILENAME = "stock_tracker.db"
TABLE_PRODUCT = "products"

# ============================================================================
# Report / Export
# ============================================================================

REPORT_TITLE = "Relatório de Estoque"
REPORT_COLUMNS: List[str] = ["Produto", "Quantidade", "Preço Unitário", "Valor Total"]
REPORT_TOTAL_LABEL = "Valor Total do Estoque: R$ {total}"

EXPORT_DEFAULT_FILENAME = "estoque.csv"
EXPORT_SUFFIX = ".csv"
EXPORT_DELIMITER = ";"
EXPORT_ENCODING = "utf-8-sig"
EXPORT_DECIMAL_SEPARATOR = ","

# ============================================================================
# Error Messages
# ============================================================================

ERROR_NAME_REQUIRED = "Nome não pode ser vazio."
ERROR_PRODUCT_NOT_FOUND = "Produto não encontrado."
ERROR_PRODUCT_EXISTS = "Produto já existe."

ERROR_QUANTITY_REQUIRED = "Quantidade não pode ser vazia."
ERROR_QUANTITY_NOT_INTEGER = "Quantidade deve ser um número inteiro."
ERROR_QUANTITY_NEGATIVE = "Quantidade não pode ser negativa."
ERROR_QUANTITY_INVALID = "Quantidade inválida."

ERROR_PRICE_REQUIRED = "Preço não pode ser vazio."
ERROR_PRICE_FORMAT = "Formato de preço inválido. Use 99 ou 99,99."
ERROR_PRICE_NEGATIVE = "Preço não pode ser negativo."
ERROR_PRICE_TOO_LARGE = "Preço máximo é 9999999999,99."

ERROR_FORM_INVALID = "Existem campos inválidos. Por favor, verifique."

# ============================================================================
# Success Messages
# ============================================================================

SUCCESS_ADDED = "Produto adicionado com sucesso."
SUCCESS_UPDATED = "Produto atualizado com sucesso."
SUCCESS_REMOVED = "Produto removido com sucesso."
SUCCESS_EXPORTED = "Dados exportados com sucesso para: {path}"
