from .pickle_serializer import PickleValueSerializer

__all__ = ["PickleValueSerializer"]
