from .link import LinkModel
from .link_vector import LinkVectorModel

__all__ = ["LinkModel", "LinkVectorModel"]
