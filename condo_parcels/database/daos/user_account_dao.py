"""
User Account DAO

Purpose
-------
Thin data-access layer for the `UserAccount` ORM entity. Provides:
- Creation with password hashing (the provisioning entry point for seed
  scripts and fixtures; the HTTP API has no account-creation route)
- Lookup by username
- Deletion (last step of a tenant or staff cascade)

Design
------
- The DAO expects an active SQLAlchemy `Session` supplied by the caller.
- Passwords are hashed using `EncryptionDec.hash_password(...)` before insert.
"""

import logging

from sqlalchemy.orm import Session

from condo_parcels.crypt.encrypt_decrypt import EncryptionDec
from condo_parcels.database.entities.directory import UserAccount

logger = logging.getLogger(__name__)


class UserAccountDao:
    """
    Data Access Object (DAO) for managing UserAccount entities.
    """

    def createUser(self, session: Session, user_data: UserAccount) -> UserAccount:
        """
        Create a new account with a hashed password.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        user_data : UserAccount
            Account entity carrying the plaintext password.

        Returns
        -------
        UserAccount
            The flushed account, with `user_id` populated.
        """
        try:
            enc = EncryptionDec()
            user_data.password = enc.hash_password(text=user_data.password)
            session.add(user_data)
            session.flush()
            return user_data
        except Exception:
            logger.exception("Error in UserAccountDao.createUser (username=%s)", user_data.username)
            raise

    def fetchUser(self, session: Session, username: str) -> UserAccount | None:
        """
        Fetch an account by username.

        Returns
        -------
        UserAccount | None
            The matching account (usernames are unique), or None.
        """
        try:
            return session.query(UserAccount).filter(UserAccount.username == username).one_or_none()
        except Exception:
            logger.exception("Error in UserAccountDao.fetchUser (username=%s)", username)
            raise

    def deleteUser(self, session: Session, user_id: int) -> bool:
        """Delete an account. Returns False when it did not exist."""
        try:
            deleted = (
                session.query(UserAccount)
                .filter(UserAccount.user_id == user_id)
                .delete(synchronize_session=False)
            )
            session.flush()
            return deleted > 0
        except Exception:
            logger.exception("Error in UserAccountDao.deleteUser (user_id=%s)", user_id)
            raise
