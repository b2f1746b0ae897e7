from collections.abc import MutableMapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Iterator, List, Optional, Tuple

# Canonical base hierarchy, top to bottom.
BASE_KEYS: Tuple[str, ...] = (
    "Plant",
    "PlantUnit",
    "PlantSection",
    "Equipment",
    "Component",
)

MISSING_PREFIX = "MISSING_"


class TokenKind(str, Enum):
    """Whether a token belongs to the structural base or the suffix block."""

    BASE = "base"
    SUFFIX = "suffix"


class TokenSource(str, Enum):
    """Evidence a token was derived from, strongest first."""

    CODIFICATION = "codification"
    REGEX = "regex"
    REGEX_ALTERNATIVE = "regex_alternative"
    SUFFIX = "suffix"
    EXCEPTION = "exception"
    MAP = "map"


@dataclass
class Token:
    """A single recognized fragment of a tag."""

    key: str
    value: str
    kind: TokenKind = TokenKind.BASE
    source: TokenSource = TokenSource.REGEX
    position: int = -1
    is_missing: bool = False
    is_replacement: bool = False
    replaced_by: str = ""  # base key this token stands in for
    source_map_key: str = ""  # token definition that produced it
    pattern: str = ""
    note: str = ""
    is_fallback: bool = False

    @property
    def is_processable(self) -> bool:
        """True when the token carries a usable, non-placeholder value."""
        return (
            not self.is_missing
            and bool(self.value and self.value.strip())
            and not self.value.upper().startswith(MISSING_PREFIX)
        )

    @property
    def mapping_summary(self) -> str:
        if self.is_replacement:
            return f"{self.source_map_key} -> {self.key} (replaces {self.replaced_by})"
        return f"{self.key} = {self.value} [{self.source.value}]"


class TokenMap(MutableMapping):
    """Insertion-ordered mapping of token key to Token with case-insensitive keys."""

    def __init__(self, items: Optional[Dict[str, Token]] = None):
        self._data: Dict[str, Tuple[str, Token]] = {}
        if items:
            for key, token in items.items():
                self[key] = token

    def __getitem__(self, key: str) -> Token:
        return self._data[key.lower()][1]

    def __setitem__(self, key: str, token: Token) -> None:
        lowered = key.lower()
        original = self._data[lowered][0] if lowered in self._data else key
        self._data[lowered] = (original, token)

    def __delitem__(self, key: str) -> None:
        del self._data[key.lower()]

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._data.values())

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._data

    def __repr__(self) -> str:
        return f"TokenMap({dict(self.items())!r})"

    def replace_all(self, ordered: List[Tuple[str, Token]]) -> None:
        """Replace the contents with ``ordered`` preserving its order."""
        self._data = {}
        for key, token in ordered:
            self[key] = token


class ResultKind(str, Enum):
    """Discriminator for the per-element result union."""

    TOKEN = "token"
    DISCIPLINE = "discipline"
    ENTITY = "entity"
    ROLE = "role"
    NAMING = "naming"
    SUFFIX = "suffix"
    TAG = "tag"
    HIERARCHY = "hierarchy"
    CATALOG = "catalog"
    IDENTITY = "identity"
    DISPOSITION = "disposition"


@dataclass
class EngineResult:
    """Fields shared by every engine result."""

    kind: ClassVar[ResultKind]

    source_id: str = ""
    is_valid: bool = False
    message: List[str] = field(default_factory=list)
    warning: List[str] = field(default_factory=list)
    error: List[str] = field(default_factory=list)

    def add_message(self, text: str) -> None:
        self.message.append(text)

    def add_warning(self, text: str) -> None:
        self.warning.append(text)

    def add_error(self, text: str) -> None:
        self.error.append(text)

    @property
    def has_errors(self) -> bool:
        return bool(self.error)


@dataclass
class TokenizationResult(EngineResult):
    """Outcome of tokenizing one raw tag."""

    kind: ClassVar[ResultKind] = ResultKind.TOKEN

    raw_input_value: str = ""
    normalized_input_value: str = ""
    tokens: TokenMap = field(default_factory=TokenMap)
    excluded_tokens: TokenMap = field(default_factory=TokenMap)
    score: float = 0.0
    token_scores: Dict[str, float] = field(default_factory=dict)
    is_consistency_checked: bool = False

    def get_token(self, key: str) -> Optional[Token]:
        return self.tokens.get(key)

    def get_value(self, key: str) -> str:
        token = self.tokens.get(key)
        return token.value if token is not None and token.is_processable else ""

    def has_token(self, key: str) -> bool:
        """
        True when a usable token exists under ``key`` or a replacement was
        produced by a definition named ``key`` (e.g. ``TagIncremental``).
        """
        token = self.tokens.get(key)
        if token is not None and token.is_processable:
            return True
        return any(
            t.is_replacement
            and t.is_processable
            and t.source_map_key.lower() == key.lower()
            for t in self.tokens.values()
        )

    def has_base(self, key: str) -> bool:
        """True when the base slot ``key`` holds a usable token."""
        token = self.tokens.get(key)
        return token is not None and token.is_processable

    def find_replacement_for(self, base_key: str) -> Optional[Token]:
        for token in self.tokens.values():
            if token.is_replacement and token.replaced_by.lower() == base_key.lower():
                return token
        return None

    @property
    def processable_tokens(self) -> List[Token]:
        return [t for t in self.tokens.values() if t.is_processable]


class ResolutionOrigin(str, Enum):
    """Where a discipline or entity code came from."""

    LOCAL = "local"
    INHERITED = "inherited"
    DEFAULT = "default"
    FOREIGN = "foreign"


@dataclass
class InheritedContext:
    """Parent-supplied classification context."""

    parent_id: str = ""
    code: str = ""


@dataclass
class ClassificationResult(EngineResult):
    code: str = ""
    origin: ResolutionOrigin = ResolutionOrigin.DEFAULT
    inherited_from: str = ""

    @property
    def is_local(self) -> bool:
        return self.origin == ResolutionOrigin.LOCAL

    @property
    def is_inherited(self) -> bool:
        return self.origin == ResolutionOrigin.INHERITED

    @property
    def is_default(self) -> bool:
        return self.origin == ResolutionOrigin.DEFAULT

    @property
    def is_foreign(self) -> bool:
        return self.origin == ResolutionOrigin.FOREIGN


@dataclass
class DisciplineResult(ClassificationResult):
    kind: ClassVar[ResultKind] = ResultKind.DISCIPLINE


@dataclass
class EntityResult(ClassificationResult):
    kind: ClassVar[ResultKind] = ResultKind.ENTITY


@dataclass
class RoleResult(EngineResult):
    kind: ClassVar[ResultKind] = ResultKind.ROLE

    role: str = ""
    is_leaf: bool = False
    aveva_type: str = ""
    business_concept: str = ""
    discipline_groups: List[str] = field(default_factory=list)
    note: str = ""


@dataclass
class NamingResult(EngineResult):
    kind: ClassVar[ResultKind] = ResultKind.NAMING

    base_name: str = ""
    normalized_base_name: str = ""
    tokens_used: List[str] = field(default_factory=list)


@dataclass
class SuffixResult(EngineResult):
    kind: ClassVar[ResultKind] = ResultKind.SUFFIX

    suffix: str = ""
    context_key: str = ""
    tokens_used: List[str] = field(default_factory=list)
    has_discipline: bool = False
    has_entity: bool = False
    has_any_tag: bool = False
    suffix_letter: str = ""
    suffix_increment: str = ""


@dataclass
class TagResult(EngineResult):
    kind: ClassVar[ResultKind] = ResultKind.TAG

    role: str = ""
    base_name: str = ""
    suffix: str = ""
    full_tag: str = ""


@dataclass
class HierarchyNode:
    """One level of the parent chain above an element."""

    role: str
    tag: str
    parent_tag: str = ""
    depth: int = 0
    is_virtual: bool = True


@dataclass
class HierarchyResult(EngineResult):
    """Parent chain of a structural element, root first; only the leaf is real."""

    kind: ClassVar[ResultKind] = ResultKind.HIERARCHY

    schema_key: str = ""
    nodes: List[HierarchyNode] = field(default_factory=list)

    @property
    def leaf_tag(self) -> str:
        return self.nodes[-1].tag if self.nodes else ""


@dataclass
class CatalogReferenceResult(EngineResult):
    kind: ClassVar[ResultKind] = ResultKind.CATALOG

    catalog_reference: str = ""
    resolution: str = ""
    geometry_kind: str = ""
    forced_geometry_kind: str = ""

    @property
    def effective_geometry_kind(self) -> str:
        return self.forced_geometry_kind or self.geometry_kind


@dataclass
class IdentityResult(EngineResult):
    kind: ClassVar[ResultKind] = ResultKind.IDENTITY

    identity_id: str = ""
    was_restored: bool = False


class QualityBucket(str, Enum):
    UNKNOWN = "Unknown"
    FINAL_IMPORT = "FinalImport"
    DB_LIMBO = "DbLimbo"
    MDB_LIMBO = "MdbLimbo"


@dataclass
class DispositionResult(EngineResult):
    kind: ClassVar[ResultKind] = ResultKind.DISPOSITION

    quality_bucket: QualityBucket = QualityBucket.UNKNOWN
    route: str = ""
    target_server_key: str = ""
    target_mdb_key: str = ""
    raw_input_value: str = ""
    normalized_input_value: str = ""
    quality_level: str = ""
    is_consistency_checked: bool = False


@dataclass
class PipelineElement:
    """One element flowing through the pipeline and the results produced for it."""

    element_id: str
    raw_tag: str
    results: List[EngineResult] = field(default_factory=list)

    def add(self, result: Optional[EngineResult]) -> None:
        if result is not None:
            self.results.append(result)

    def get(self, kind: ResultKind) -> Optional[EngineResult]:
        for result in self.results:
            if result.kind == kind:
                return result
        return None

    @property
    def kinds(self) -> List[ResultKind]:
        return [r.kind for r in self.results]

    @property
    def full_tag(self) -> str:
        tag = self.get(ResultKind.TAG)
        return tag.full_tag if tag is not None else ""

    @property
    def identity_id(self) -> str:
        identity = self.get(ResultKind.IDENTITY)
        return identity.identity_id if identity is not None else ""

    def summary(self) -> Dict[str, Any]:
        return {
            "element_id": self.element_id,
            "raw_tag": self.raw_tag,
            "results": {r.kind.value: r.is_valid for r in self.results},
        }


@dataclass
class TakeOverPoint:
    """Connection point (nozzle, electrical connection, datum) of a tagged element."""

    tag: str = ""
    owner_model: str = ""
    description: str = ""
    geometry_kind: str = ""
    raw_catalog_reference: str = ""
    dn: str = ""
    pn: str = ""
    norm: str = ""
    connection_type: str = ""
    reference_number: str = ""
    position: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    direction: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    source_file: str = ""
    source_version: str = ""
