"""
Tag Resolution Pipeline

This module wires the engines into one forward-only flow:

raw tag -> tokenizer -> composer -> [catalog reference] -> identity -> disposition

Structures (sites, zones, equipment) and take-over points (nozzles,
electrical connections, datums) share the flow; points additionally resolve
a catalog reference and a role-letter suffix.

Features:
- Single-element and batch processing
- Thread-pool batches with results in input order
- Identity store loaded once per batch and flushed at a fixed cadence
- Store failures isolated to identity resolution

Author: Plant Tag Resolution Team
Version: 1.0.0
"""

import threading
import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Optional, Sequence, Union

from .common.exceptions import IdentityStoreError
from .common.logger import PipelineLogger
from .config.configuration_manager import PipelineConfig
from .engine.catalog import CatalogReferenceEngine
from .engine.composer import ComposerEngine, CompositionResult
from .engine.disposition import DispositionEngine, routes_from_config
from .engine.identity import (
    IdentityEngine,
    IdentityRequest,
    IdentityStore,
    assign_identity,
)
from .engine.tokenizer import TokenEngine
from .maps.map_registry import MapRegistry
from .utils.DataStructures import (
    CatalogReferenceResult,
    IdentityResult,
    InheritedContext,
    PipelineElement,
    TakeOverPoint,
    TokenizationResult,
)

BatchItem = Union[str, TakeOverPoint]


class TagResolutionPipeline:
    """Runs tags and take-over points through every engine."""

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        maps: Optional[MapRegistry] = None,
        store: Optional[IdentityStore] = None,
        logger: Optional[PipelineLogger] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            config: Pipeline configuration; defaults when omitted
            maps: Code tables; loaded from ``config.pipeline.maps_dir`` or the
                packaged defaults when omitted
            store: Identity store; created from ``config.identity.store_path``
            logger: Pipeline logger

        Raises:
            ValueError: If no store is given and the configured store path is empty
            MapLoadError: If the configured maps directory cannot be loaded
        """
        self.config = config or PipelineConfig()
        self.logger = logger or PipelineLogger(
            self.config.pipeline.log_level, self.config.pipeline.verbose
        )

        if maps is None:
            if self.config.pipeline.maps_dir:
                maps = MapRegistry.from_directory(self.config.pipeline.maps_dir, self.logger)
            else:
                maps = MapRegistry.default()
        self.maps = maps

        self.store = store or IdentityStore(self.config.identity.store_path, self.logger)
        self._store_loaded = False
        self._store_error = ""
        self._resolve_count = 0
        self._count_lock = threading.Lock()

        self.token_engine = TokenEngine(
            self.maps,
            score_weights=self.config.tokenizer.score_weights,
            missing_penalty=self.config.tokenizer.missing_penalty,
            logger=self.logger,
        )
        self.composer = ComposerEngine(
            self.maps,
            default_discipline=self.config.composer.default_discipline,
            default_entity=self.config.composer.default_entity,
            discipline_context_codes=self.config.composer.discipline_context_codes,
            entity_context_codes=self.config.composer.entity_context_codes,
            increment_source=self.store.point_increment,
            logger=self.logger,
        )
        self.catalog_engine = CatalogReferenceEngine(self.maps.catalog_reference, self.logger)
        self.identity_engine = IdentityEngine(
            self.store, self.config.identity.known_geometry_kinds, self.logger
        )
        self.disposition_engine = DispositionEngine(
            routes_from_config(self.config.disposition.routes), self.logger
        )

    def process_structure(
        self,
        raw_tag: str,
        element_id: Optional[str] = None,
        inherited_discipline: Optional[InheritedContext] = None,
        inherited_entity: Optional[InheritedContext] = None,
    ) -> PipelineElement:
        """Resolve one structural tag and persist its identity."""
        self.open_store()
        element = self._process_structure(
            raw_tag, element_id, inherited_discipline, inherited_entity
        )
        self.flush()
        return element

    def process_point(
        self,
        point: TakeOverPoint,
        element_id: Optional[str] = None,
        inherited_discipline: Optional[InheritedContext] = None,
        inherited_entity: Optional[InheritedContext] = None,
    ) -> PipelineElement:
        """Resolve one take-over point and persist its identity."""
        self.open_store()
        element = self._process_point(point, element_id, inherited_discipline, inherited_entity)
        self.flush()
        return element

    def process_batch(
        self,
        items: Sequence[BatchItem],
        max_workers: Optional[int] = None,
    ) -> List[PipelineElement]:
        """
        Resolve many tags and points in parallel.

        Args:
            items: Raw structural tags and/or TakeOverPoint records
            max_workers: Thread count; defaults to ``config.pipeline.max_workers``

        Returns:
            One PipelineElement per item, in input order
        """
        items = list(items)
        if not items:
            return []

        self.open_store(reload=True)
        workers = max(1, min(max_workers or self.config.pipeline.max_workers, len(items)))
        results: List[Optional[PipelineElement]] = [None] * len(items)

        self.logger.info(f"Processing batch of {len(items)} items with {workers} workers")
        with ThreadPoolExecutor(max_workers=workers) as executor:
            future_to_index = {
                executor.submit(self._process_item, item): index
                for index, item in enumerate(items)
            }
            for future in as_completed(future_to_index):
                results[future_to_index[future]] = future.result()

        self.flush()
        self.logger.info(f"Batch complete: {len(items)} items")
        return results

    def open_store(self, reload: bool = False) -> bool:
        """
        Load the identity store once; ``reload`` forces a fresh load.

        Returns:
            True when the store is usable
        """
        if self._store_loaded and not reload:
            return not self._store_error
        try:
            self.store.load()
            self._store_error = ""
        except IdentityStoreError as e:
            self._store_error = str(e)
            self.logger.error(f"Identity store unavailable: {e}")
        self._store_loaded = True
        return not self._store_error

    def flush(self) -> None:
        """Save the identity store if it changed; failures disable identity resolution."""
        if self._store_error or not self.store.is_dirty:
            return
        try:
            self.store.save()
        except IdentityStoreError as e:
            self._store_error = str(e)
            self.logger.error(f"Identity store save failed: {e}")

    def _process_item(self, item: BatchItem) -> PipelineElement:
        if isinstance(item, TakeOverPoint):
            element = self._process_point(item)
        else:
            element = self._process_structure(item)

        with self._count_lock:
            self._resolve_count += 1
            due = self._resolve_count % self.config.identity.flush_every == 0
        if due:
            self.flush()
        return element

    def _process_structure(
        self,
        raw_tag: str,
        element_id: Optional[str] = None,
        inherited_discipline: Optional[InheritedContext] = None,
        inherited_entity: Optional[InheritedContext] = None,
    ) -> PipelineElement:
        element = PipelineElement(element_id=element_id or str(uuid.uuid4()), raw_tag=raw_tag or "")
        tokens = self.token_engine.tokenize(raw_tag, source_id=element.element_id)
        element.add(tokens)

        composition = self.composer.compose(tokens, inherited_discipline, inherited_entity)
        for result in composition.as_list():
            element.add(result)

        request = IdentityRequest(
            full_tag=composition.full_tag,
            geometry_kind=composition.role.role,
        )
        self._resolve_identity(element, request)
        self._classify(element, tokens, composition)
        return element

    def _process_point(
        self,
        point: TakeOverPoint,
        element_id: Optional[str] = None,
        inherited_discipline: Optional[InheritedContext] = None,
        inherited_entity: Optional[InheritedContext] = None,
    ) -> PipelineElement:
        element = PipelineElement(element_id=element_id or str(uuid.uuid4()), raw_tag=point.tag)
        tokens = self.token_engine.tokenize(point.tag, source_id=element.element_id)
        element.add(tokens)

        composition = self.composer.compose(
            tokens,
            inherited_discipline,
            inherited_entity,
            geometry_kind=point.geometry_kind or "UNKNOWN",
            description=point.description,
            owner_model=point.owner_model,
            reference_number=point.reference_number,
        )
        for result in composition.as_list():
            element.add(result)

        catalog = self.catalog_engine.resolve(point, source_id=element.element_id)
        element.add(catalog)

        self._resolve_identity(element, self._point_request(point, composition, catalog))
        self._classify(element, tokens, composition)
        return element

    @staticmethod
    def _point_request(
        point: TakeOverPoint,
        composition: CompositionResult,
        catalog: CatalogReferenceResult,
    ) -> IdentityRequest:
        return IdentityRequest(
            full_tag=composition.full_tag,
            geometry_kind=catalog.effective_geometry_kind or point.geometry_kind,
            owner_model_name=point.owner_model,
            description=point.description,
            catalog_reference=catalog.catalog_reference,
            reference_number=point.reference_number,
            source_file=point.source_file,
            source_version=point.source_version,
            suffix_letter=composition.suffix.suffix_letter,
            suffix_increment=composition.suffix.suffix_increment,
        )

    def _classify(
        self,
        element: PipelineElement,
        tokens: TokenizationResult,
        composition: CompositionResult,
    ) -> None:
        disposition = self.disposition_engine.classify(
            tokens, composition.discipline, composition.entity
        )
        if element.identity_id:
            disposition.source_id = element.identity_id
        element.add(disposition)

    def _resolve_identity(self, element: PipelineElement, request: IdentityRequest) -> None:
        if self._store_error:
            failed = IdentityResult(source_id=element.element_id, is_valid=False)
            failed.add_error(
                f"Identity: store unavailable, identity not resolved ({self._store_error})."
            )
            element.add(failed)
            return
        resolution = self.identity_engine.resolve(request)
        assign_identity(element, resolution)
