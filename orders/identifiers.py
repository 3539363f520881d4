"""
Order identifier generation.

Identifiers look like ``ORD1760870400-9f2c41ab``: a fixed prefix, the
unix time in seconds, and a random suffix so orders placed within the
same second do not collide. Nothing is checked against the database.
"""
import secrets
import time

ORDER_ID_PREFIX = 'ORD'


def generate_order_id() -> str:
    return f"{ORDER_ID_PREFIX}{int(time.time())}-{secrets.token_hex(4)}"
