"""
Identity Engine for resolved tags

This module gives every take-over point (or element) a stable identifier.
The same tag, geometry kind and owner model always map to the same id across
runs; changed attributes are updated in place on the stored record.

Features:
- Exact-key lookup (tag + geometry kind + owner model, case-insensitive)
- In-place update of version, description, catalog and reference number
- Record checks on every resolve (messages, warnings, errors)
- Source file names stripped of their version suffix
- Identity fan-out onto every result of a pipeline element

Author: Plant Tag Resolution Team
Version: 1.0.0
"""

import copy
import re
import uuid
from dataclasses import dataclass
from pathlib import PurePath
from typing import Iterable, Optional

from ...common.logger import PipelineLogger
from ...utils.DataStructures import IdentityResult, PipelineElement, ResultKind
from .identity_store import IdentityRecord, IdentityStore, utc_now

DEFAULT_KNOWN_GEOMETRY_KINDS = (
    "NOZZ",
    "ELCONN",
    "DATUM",
    "CYLI",
    "WORL",
    "SITE",
    "SUB_SITE",
    "ZONE",
    "EQUI",
)

_SOURCE_VERSION = re.compile(r"\.asm-\d+\.txt$", re.IGNORECASE)

# Result kinds that receive the resolved identity.
IDENTITY_TARGETS = frozenset(kind for kind in ResultKind if kind != ResultKind.IDENTITY)


def strip_source_version(file_name: str) -> str:
    """``/exports/pump.asm-3.txt`` -> ``pump.asm.txt``."""
    if not file_name:
        return ""
    return _SOURCE_VERSION.sub(".asm.txt", PurePath(file_name).name)


@dataclass
class IdentityRequest:
    """Everything the identity engine needs to know about one element."""

    full_tag: str
    geometry_kind: str = ""
    owner_model_name: str = ""
    description: str = ""
    catalog_reference: str = ""
    reference_number: str = ""
    source_file: str = ""
    source_version: str = ""
    suffix_letter: str = ""
    suffix_increment: str = ""
    identity_id: str = ""


@dataclass
class IdentityResolution:
    """Outcome of a resolve; ``record`` is a snapshot, not the stored record."""

    identity_id: str
    was_restored: bool
    record: IdentityRecord


class IdentityEngine:
    """Resolves and persists stable identities through an IdentityStore."""

    def __init__(
        self,
        store: IdentityStore,
        known_geometry_kinds: Iterable[str] = DEFAULT_KNOWN_GEOMETRY_KINDS,
        logger: PipelineLogger = PipelineLogger("INFO", False),
    ):
        self.store = store
        self.known_geometry_kinds = {k.upper() for k in known_geometry_kinds}
        self.logger = logger

    def resolve(self, request: IdentityRequest) -> IdentityResolution:
        """
        Find or create the identity record for ``request``.

        The lookup, update and upsert run under the store lock.

        Raises:
            ValueError: If request is None
        """
        if request is None:
            raise ValueError("resolve() requires an IdentityRequest")

        with self.store.lock:
            existing = None
            if request.identity_id:
                existing = self.store.get(request.identity_id)
            if existing is None and request.full_tag.strip():
                existing = self.store.find(
                    request.full_tag, request.geometry_kind, request.owner_model_name
                )

            if existing is not None:
                record = self._update(existing, request)
                restored = True
            else:
                record = self._create(request)
                restored = False

            self.store.upsert(record)
            snapshot = copy.deepcopy(record)

        if restored:
            self.logger.debug(f"Identity restored for '{request.full_tag}': {record.id}")
        else:
            self.logger.debug(f"Identity assigned for '{request.full_tag}': {record.id}")
        return IdentityResolution(
            identity_id=record.id, was_restored=restored, record=snapshot
        )

    def _create(self, request: IdentityRequest) -> IdentityRecord:
        now = utc_now()
        record = IdentityRecord(
            id=str(uuid.uuid4()),
            tag=request.full_tag.strip(),
            geometry_kind=(request.geometry_kind or "").strip().upper(),
            generated_name=request.full_tag.strip() or "<unnamed>",
            catalog_reference=request.catalog_reference,
            reference_number=request.reference_number,
            source_file=strip_source_version(request.source_file),
            source_version=request.source_version,
            owner_model_name=request.owner_model_name,
            suffix_letter=request.suffix_letter,
            suffix_increment=request.suffix_increment,
            description=request.description,
            created_at=now,
            updated_at=now,
        )
        self.evaluate(record, request, previous_catalog=None, previous_version=None)
        return record

    def _update(self, record: IdentityRecord, request: IdentityRequest) -> IdentityRecord:
        previous_catalog = record.catalog_reference
        previous_version = record.source_version

        record.updated_at = max(utc_now(), record.updated_at)
        record.source_version = request.source_version or record.source_version
        record.description = request.description or record.description
        record.catalog_reference = request.catalog_reference
        record.reference_number = request.reference_number or record.reference_number
        if request.suffix_increment:
            record.suffix_letter = request.suffix_letter
            record.suffix_increment = request.suffix_increment

        self.evaluate(record, request, previous_catalog, previous_version)
        return record

    def evaluate(
        self,
        record: IdentityRecord,
        request: IdentityRequest,
        previous_catalog: Optional[str],
        previous_version: Optional[str],
    ) -> None:
        """Refresh the record diagnostics and its validity."""
        record.message = []
        record.warning = []
        record.error = []

        if not record.tag:
            record.error.append("Identity: tag is empty, record cannot be identified.")
        if not record.geometry_kind:
            record.warning.append(f"Identity: geometry kind undefined for '{record.tag}'.")
        elif record.geometry_kind not in self.known_geometry_kinds:
            record.warning.append(
                f"Identity: geometry kind '{record.geometry_kind}' is not a known kind."
            )
        if not record.catalog_reference:
            record.warning.append(f"Identity: catalog reference missing for '{record.tag}'.")
        if not record.owner_model_name:
            record.warning.append("Identity: owner model name not defined.")

        incoming_tag = request.full_tag.strip()
        if record.tag and incoming_tag and record.tag.upper() != incoming_tag.upper():
            record.error.append(
                f"Identity: stored tag '{record.tag}' differs from incoming '{incoming_tag}'."
            )

        if previous_catalog is not None and (previous_catalog or "").upper() != (
            record.catalog_reference or ""
        ).upper():
            record.message.append(
                f"Identity: catalog reference '{previous_catalog}' -> '{record.catalog_reference}'."
            )
        if previous_version is not None and (previous_version or "") != (
            record.source_version or ""
        ):
            record.message.append(
                f"Identity: source version '{previous_version}' -> '{record.source_version}'."
            )

        record.is_valid = not record.error
        if not record.is_valid:
            record.message.append(f"Identity: record invalid ({len(record.error)} error(s)).")
        elif record.warning:
            record.message.append(f"Identity: record valid with {len(record.warning)} warning(s).")
        else:
            record.message.append("Identity: record validated.")


def assign_identity(element: PipelineElement, resolution: IdentityResolution) -> IdentityResult:
    """
    Stamp the resolved id on every result of ``element``.

    Returns the element's IdentityResult, adding one when it has none.
    """
    status = (
        f"Identity restored: {resolution.identity_id}"
        if resolution.was_restored
        else f"Identity assigned: {resolution.identity_id}"
    )

    for result in element.results:
        if result.kind in IDENTITY_TARGETS:
            result.source_id = resolution.identity_id
            result.add_message(status)

    identity = element.get(ResultKind.IDENTITY)
    if identity is None:
        identity = IdentityResult()
        element.add(identity)
    identity.source_id = resolution.identity_id
    identity.identity_id = resolution.identity_id
    identity.was_restored = resolution.was_restored
    identity.is_valid = resolution.record.is_valid
    identity.add_message(status)
    for warning in resolution.record.warning:
        identity.add_warning(warning)
    for error in resolution.record.error:
        identity.add_error(error)
    return identity
