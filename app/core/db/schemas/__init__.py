# Import models so Alembic and Base metadata are aware of them
from .generated import GeneratedSet, GeneratedItem  # noqa: F401
