import bcrypt


class EncryptionDec:
    """
    Utility class for password hashing and verification.

    Methods
    -------
    hash_password(text: str) -> str
        Hashes a plaintext password using bcrypt with a generated salt.
    check_passwords(plain_text: str, passwd: str) -> bool
        Verifies a plaintext password against a stored password.
    is_hashed(passwd: str) -> bool
        Tells bcrypt hashes apart from legacy plaintext seeds.
    """

    def hash_password(self, text: str) -> str:
        """
        Hash a plaintext password using bcrypt.

        Parameters
        ----------
        text : str
            The plaintext password.

        Returns
        -------
        str
            The bcrypt-hashed password (UTF-8 decoded).
        """
        salt = bcrypt.gensalt()
        hashed = bcrypt.hashpw(text.encode("utf-8"), salt)
        return hashed.decode("utf-8")

    def is_hashed(self, passwd: str) -> bool:
        """Return True when ``passwd`` looks like a bcrypt hash (``$2a$``/``$2b$``/``$2y$``)."""
        return passwd.startswith("$2")

    def check_passwords(self, plain_text: str, passwd: str) -> bool:
        """
        Verify if a plaintext password matches a stored password.

        Parameters
        ----------
        plain_text : str
            The plaintext password to check.
        passwd : str
            The stored password: a bcrypt hash, or plaintext for accounts
            seeded before hashing was introduced.

        Returns
        -------
        bool
            True if the password matches, False otherwise.
        """
        if not passwd:
            return False
        if self.is_hashed(passwd):
            return bcrypt.checkpw(plain_text.encode("utf-8"), passwd.encode("utf-8"))
        return plain_text == passwd
