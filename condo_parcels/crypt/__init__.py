"""
The `crypt` package provides the password utilities behind login.

Contents
--------
- encrypt_decrypt
    Utility module exposing the `EncryptionDec` class:
        * `hash_password`: hashes plaintext passwords using bcrypt
        * `check_passwords`: verifies a plaintext password against a stored one
          (bcrypt hash, or plaintext for legacy seeded accounts)
        * `is_hashed`: detects bcrypt hashes
"""
