"""Composer handlers, one per composition step."""

from .ClassificationHandler import ClassificationHandler
from .ComposerHandler import ComposerHandler
from .DisciplineHandler import DEFAULT_DISCIPLINE, DisciplineHandler
from .EntityHandler import DEFAULT_ENTITY, EntityHandler
from .HierarchyHandler import HierarchyHandler
from .NamingHandler import NamingHandler
from .PointSuffixHandler import PointSuffixHandler
from .RoleHandler import RoleHandler
from .SuffixHandler import SuffixHandler
from .TagHandler import TagHandler

__all__ = [
    "ComposerHandler",
    "ClassificationHandler",
    "DisciplineHandler",
    "EntityHandler",
    "RoleHandler",
    "NamingHandler",
    "SuffixHandler",
    "PointSuffixHandler",
    "TagHandler",
    "HierarchyHandler",
    "DEFAULT_DISCIPLINE",
    "DEFAULT_ENTITY",
]
