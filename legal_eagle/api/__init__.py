"""
API Package: FastAPI Router • Models • JWT Utils
================================================

Contents
--------
- fast_api
    FastAPI router with endpoints for:
      • Auth: register, login, logout, me (shared accounts)
      • Lawyers: direct register/login, directory, profile edits, availability
      • Appointments: book, get, update status/notes, list by user or lawyer
      • Wallet: deposit, balance, paginated transactions
      • Chat: create room, history, status, send, read, accept/decline, unlock

- models
    Pydantic data contracts for request validation and OpenAPI schema generation.

- utils
    JWT helpers:
      • create_access_token(data, expires_at): issues signed JWTs with exp and jti
      • verify_token(token): validates JWTs and returns their claims
      • bearer_token(header): extracts the token of an Authorization header

Operational Notes
-----------------
- Security: Auth via `Authorization: Bearer <token>`. A token must both verify
  and match a live session row. Never log tokens or passwords.
"""
