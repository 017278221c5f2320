"""
Document mixins.

- SchemaMixin: schema registry and field interception
- LifecycleMixin: fill, validate, canonicalize, hooks, serialization
- PersistenceMixin: save, delete and class-level queries
"""

from .schema_mixin import SchemaMixin
from .lifecycle_mixin import LifecycleMixin
from .persistence_mixin import PersistenceMixin

__all__ = ["SchemaMixin", "LifecycleMixin", "PersistenceMixin"]
