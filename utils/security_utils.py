"""
Security utilities for account input validation
"""
import re

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')

MIN_PASSWORD_LENGTH = 12


def validate_email(email: str) -> bool:
    """Validate email format"""
    return bool(email) and EMAIL_PATTERN.match(email) is not None


def validate_password_strength(password: str) -> None:
    """
    Validate password strength according to security requirements.

    Enforces:
    - Minimum length: 12 characters
    - At least one uppercase letter (A-Z)
    - At least one lowercase letter (a-z)
    - At least one digit (0-9)
    - At least one special character (!@#$%^&*(),.?":{}|<>])

    Args:
        password: Password string to validate

    Raises:
        ValueError: If password does not meet strength requirements
    """
    if not password:
        raise ValueError("Password cannot be empty")

    # Check minimum length
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    # Check for uppercase letter
    if not re.search(r'[A-Z]', password):
        raise ValueError("Password must contain at least one uppercase letter (A-Z)")

    # Check for lowercase letter
    if not re.search(r'[a-z]', password):
        raise ValueError("Password must contain at least one lowercase letter (a-z)")

    # Check for digit
    if not re.search(r'[0-9]', password):
        raise ValueError("Password must contain at least one digit (0-9)")

    # Check for special character
    if not re.search(r'[!@#$%&*(),.?":{}|<>\[\]^]', password):
        raise ValueError("Password must contain at least one special character (!@#$%^&*(),.?\":{}|<>[])")
