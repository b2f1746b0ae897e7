"""
Code table models.

Pydantic models for every code table the pipeline consumes. Each table is a
YAML (or JSON) document; ``model_validate`` is the single entry point so
invalid tables fail fast with a readable error.
"""

import re
from abc import abstractmethod
from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, Field, field_validator, model_validator

CODIFICATION_TYPES = ("Plant", "PlantUnit", "PlantSection", "Equipment")

PREFIX_LENGTH = 3


class CodificationEntry(BaseModel):
    """One authoritative code and the parent codes it may hang under."""

    code: str = Field(..., description="Code as it appears in tags (e.g. 'PCM').")
    type: str = Field(
        ..., description="Hierarchy level: Plant, PlantUnit, PlantSection or Equipment."
    )
    parent_codes: List[str] = Field(
        default_factory=list, description="Codes of the allowed parents."
    )
    description: str = Field("", description="Free-text designation.")

    @field_validator("code")
    @classmethod
    def _upper_code(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("parent_codes")
    @classmethod
    def _upper_parents(cls, value: List[str]) -> List[str]:
        return [v.strip().upper() for v in value if v and v.strip()]

    @field_validator("type")
    @classmethod
    def _known_type(cls, value: str) -> str:
        for known in CODIFICATION_TYPES:
            if known.lower() == value.strip().lower():
                return known
        raise ValueError(f"Unknown codification type '{value}'")


class CodificationMap(BaseModel):
    """
    Authoritative hierarchical code table.

    Accepts either a flat ``entries`` list or a nested ``hierarchy`` of
    ``Plant -> PlantUnit -> PlantSection -> [Equipment]``; both are flattened
    into ``entries`` keyed by code.
    """

    entries: Dict[str, CodificationEntry] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _flatten(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        entries: Dict[str, Dict[str, Any]] = {}

        def add(code: str, level: int, parent: Optional[str]) -> None:
            key = str(code).strip().upper()
            entry = entries.setdefault(
                key, {"code": key, "type": CODIFICATION_TYPES[level], "parent_codes": []}
            )
            if parent and parent not in entry["parent_codes"]:
                entry["parent_codes"].append(parent)

        def walk(node: Any, level: int, parent: Optional[str]) -> None:
            if level >= len(CODIFICATION_TYPES) or node is None:
                return
            if isinstance(node, dict):
                for code, children in node.items():
                    add(code, level, parent)
                    walk(children, level + 1, str(code).strip().upper())
            elif isinstance(node, list):
                for code in node:
                    add(code, level, parent)
            else:
                add(node, level, parent)

        walk(data.get("hierarchy"), 0, None)

        raw_entries = data.get("entries") or []
        if isinstance(raw_entries, dict):
            raw_entries = [{"code": k, **(v or {})} for k, v in raw_entries.items()]
        for raw in raw_entries:
            key = str(raw.get("code", "")).strip().upper()
            parents = raw.get("parent_codes") or (
                [raw["parent_code"]] if raw.get("parent_code") else []
            )
            merged = entries.setdefault(
                key, {"code": key, "type": raw.get("type", ""), "parent_codes": []}
            )
            merged["type"] = raw.get("type", merged["type"])
            merged["description"] = raw.get("description", "")
            for parent in parents:
                parent = str(parent).strip().upper()
                if parent not in merged["parent_codes"]:
                    merged["parent_codes"].append(parent)

        return {"entries": entries}

    def get(self, code: str) -> Optional[CodificationEntry]:
        return self.entries.get((code or "").strip().upper())

    def lookup(self, segment: str) -> Optional[CodificationEntry]:
        """Find ``segment`` by full value first, then by its 3-letter prefix."""
        if not segment:
            return None
        entry = self.get(segment)
        if entry is None and len(segment) > PREFIX_LENGTH:
            entry = self.get(segment[:PREFIX_LENGTH])
        return entry


class TokenRegexDefinition(BaseModel):
    """Regex rule for one token kind."""

    name: str = Field("", description="Definition name; defaults to its map key.")
    pattern: str = Field(..., description="Regex matched against a whole tag part.")
    type: str = Field("base", description="'base' or 'suffix'.")
    position: int = Field(-1, description="Part index the rule applies to; -1 if any.")
    example: str = Field("", description="Sample value for documentation.")
    description: str = Field("", description="Free-text description.")

    @field_validator("pattern")
    @classmethod
    def _compilable(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"Invalid regex '{value}': {e}")
        return value

    @field_validator("type")
    @classmethod
    def _known_kind(cls, value: str) -> str:
        lowered = value.strip().lower()
        if lowered not in ("base", "suffix"):
            raise ValueError(f"Token regex type must be 'base' or 'suffix', got '{value}'")
        return lowered

    @property
    def is_base(self) -> bool:
        return self.type == "base"

    def full_match(self, value: str) -> bool:
        return bool(re.fullmatch(self.pattern, value or "", re.IGNORECASE))


class TokenRegexMap(BaseModel):
    token_regex: Dict[str, TokenRegexDefinition] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _fill_names(self) -> "TokenRegexMap":
        for key, definition in self.token_regex.items():
            if not definition.name:
                definition.name = key
        return self

    def get(self, name: str) -> Optional[TokenRegexDefinition]:
        for key, definition in self.token_regex.items():
            if key.lower() == (name or "").lower():
                return definition
        return None

    def base_by_position(self) -> Dict[int, List[TokenRegexDefinition]]:
        grouped: Dict[int, List[TokenRegexDefinition]] = {}
        for definition in self.token_regex.values():
            if definition.is_base and definition.position >= 0:
                grouped.setdefault(definition.position, []).append(definition)
        return dict(sorted(grouped.items()))

    def suffix_definitions(self) -> List[TokenRegexDefinition]:
        return [d for d in self.token_regex.values() if not d.is_base]


class CodeDefinition(BaseModel):
    code: str = Field(..., description="Short code as written in tags.")
    designation: str = Field("", description="Human readable name.")
    order: int = Field(0, description="Display order.")
    family: str = Field("", description="Grouping family.")

    @field_validator("code")
    @classmethod
    def _upper_code(cls, value: str) -> str:
        return value.strip().upper()


class _CodeTable(BaseModel):
    """Shared lookups for discipline and entity tables."""

    @abstractmethod
    def _definitions(self) -> Dict[str, CodeDefinition]:
        """Key to definition for this table."""

    def codes(self) -> Set[str]:
        codes = set()
        for key, definition in self._definitions().items():
            codes.add(key.strip().upper())
            codes.add(definition.code)
        return codes

    def contains(self, code: str) -> bool:
        return bool(code) and code.strip().upper() in self.codes()

    def resolve_code(self, code: str) -> str:
        """Map a key or code to its canonical code; empty if unknown."""
        wanted = (code or "").strip().upper()
        for key, definition in self._definitions().items():
            if wanted in (key.strip().upper(), definition.code):
                return definition.code
        return ""


class DisciplineMap(_CodeTable):
    disciplines: Dict[str, CodeDefinition] = Field(default_factory=dict)

    def _definitions(self) -> Dict[str, CodeDefinition]:
        return self.disciplines


class EntityMap(_CodeTable):
    entities: Dict[str, CodeDefinition] = Field(default_factory=dict)

    def _definitions(self) -> Dict[str, CodeDefinition]:
        return self.entities


class RoleDefinition(BaseModel):
    aveva_type: str = Field("", description="Target model element type.")
    business_concept: str = Field("", description="Business meaning of the role.")
    is_leaf: bool = Field(False, description="Whether the role cannot have children.")
    discipline_groups: List[str] = Field(default_factory=list)
    description: str = Field("", description="Free-text description.")


class RoleMap(BaseModel):
    roles: Dict[str, RoleDefinition] = Field(default_factory=dict)

    def get(self, role: str) -> Optional[RoleDefinition]:
        for key, definition in self.roles.items():
            if key.upper() == (role or "").upper():
                return definition
        return None


class TokenGroup(BaseModel):
    base: List[str] = Field(default_factory=list)
    suffix: List[str] = Field(default_factory=list)


class DisciplineSchema(BaseModel):
    hierarchy: List[str] = Field(default_factory=list)
    tokens: Dict[str, TokenGroup] = Field(default_factory=dict)

    def group_for(self, role: str) -> Optional[TokenGroup]:
        for key, group in self.tokens.items():
            if key.upper() == (role or "").upper():
                return group
        return None


class DisciplineHierarchyTokenMap(BaseModel):
    """Per-discipline naming and suffix schemas keyed by role."""

    disciplines: Dict[str, DisciplineSchema] = Field(default_factory=dict)

    def get(self, discipline: str) -> Optional[DisciplineSchema]:
        for key, schema in self.disciplines.items():
            if key.upper() == (discipline or "").upper():
                return schema
        return None


class CatalogReferenceMap(BaseModel):
    """Description keyword to catalog reference, per point geometry kind."""

    geometries: Dict[str, Dict[str, str]] = Field(default_factory=dict)

    def entries_for(self, geometry_kind: str) -> Dict[str, str]:
        for key, entries in self.geometries.items():
            if key.upper() == (geometry_kind or "").upper():
                return entries
        return {}


class HeaderMap(BaseModel):
    """Logical field name to raw export header."""

    headings: Dict[str, str] = Field(default_factory=dict)
