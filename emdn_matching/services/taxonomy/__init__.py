"""Category taxonomy index."""
from emdn_matching.services.taxonomy.tree import CategoryNode, CategoryTree

__all__ = ["CategoryNode", "CategoryTree"]
