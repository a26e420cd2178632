from .static_relation_provider import StaticRelationProvider

__all__ = ["StaticRelationProvider"]
