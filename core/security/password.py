"""Password hashing and verification using passlib's bcrypt scheme."""

from passlib.context import CryptContext

BCRYPT_ROUNDS = 10

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=BCRYPT_ROUNDS,
)


def hash_password(password: str) -> str:
    """
    Hash a password with bcrypt.

    Args:
        password: The plaintext password

    Returns:
        The salted bcrypt hash
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plaintext password against a stored bcrypt hash.

    Args:
        plain_password: The password supplied by the caller
        hashed_password: The stored hash

    Returns:
        True if the password matches, False otherwise

    Raises:
        TypeError: If either argument is None
    """
    if plain_password is None or hashed_password is None:
        raise TypeError("password and hash must be strings")
    return pwd_context.verify(plain_password, hashed_password)
