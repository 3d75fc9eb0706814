import re
import secrets
from sqlalchemy.orm import Session
from tripsplit.models.trips import Trip

HASH_CODE_CHARS = "abcdefghijklmnopqrstuvwxyz0123456789"
HASH_CODE_PATTERN = re.compile(r"^[a-z0-9]{6,8}$")


def generate_hash_code(length: int = 6) -> str:
    """Generate a random share code of lowercase letters and digits, e.g. a7x9k2"""
    return "".join(secrets.choice(HASH_CODE_CHARS) for _ in range(length))


def is_valid_hash_code(hash_code: str) -> bool:
    """Share codes are 6-8 lowercase letters or digits"""
    return bool(HASH_CODE_PATTERN.match(hash_code))


def create_unique_hash_code(db: Session, max_attempts: int = 10) -> str:
    """
    Generate a share code no other trip uses.
    Retries with longer codes after repeated collisions.
    """
    for length in (6, 8):
        for _ in range(max_attempts):
            hash_code = generate_hash_code(length)
            existing_trip = db.query(Trip).filter(Trip.hash_code == hash_code).first()
            if not existing_trip:
                return hash_code

    raise RuntimeError("Unable to generate unique hash code after maximum attempts")
