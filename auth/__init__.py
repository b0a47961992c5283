"""
auth — User authentication module.

Provides:
  • JWT creation & verification (python-jose, HS256)
  • Password hashing (bcrypt, per-record salt)
  • Error types raised by the user service
  • ``get_current_user_id`` FastAPI dependency
"""
