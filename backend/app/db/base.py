from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Largest primary key the store can hold (signed 64-bit INTEGER)
MAX_ID = 2**63 - 1


def is_storable_id(value) -> bool:
    return isinstance(value, int) and 1 <= value <= MAX_ID
