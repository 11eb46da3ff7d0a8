"""
The `crypt` package provides the password hashing used by registration and
login of both users and direct lawyers.

Contents
--------
- encrypt_decrypt
    Utility module exposing the `EncryptionDec` class:
        * `hash_password`: securely hashes plaintext passwords using bcrypt
        * `check_passwords`: verifies a plaintext password against a hashed one
"""
