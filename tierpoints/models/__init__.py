# tierpoints/models/__init__.py
from tierpoints.models.customer import Customer

__all__ = ["Customer"]
