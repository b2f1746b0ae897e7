"""
Shared pytest fixtures for plant tag resolution tests.
"""

from pathlib import Path
from typing import Any, Dict

import pytest
import yaml

from plant_tag_resolution.common.logger import PipelineLogger
from plant_tag_resolution.engine.composer import ComposerEngine
from plant_tag_resolution.engine.tokenizer import TokenEngine
from plant_tag_resolution.maps.map_registry import MapRegistry


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Create a temporary directory for test files."""
    return tmp_path


@pytest.fixture
def map_tables() -> Dict[str, Dict[str, Any]]:
    """Small but complete set of code tables keyed by file stem."""
    return {
        "codification": {
            "hierarchy": {
                "PCM": {"MHS": {"MFS": ["STR", "PMP"]}},
            },
            "entries": [
                {
                    "code": "ORF",
                    "type": "PlantSection",
                    "parent_codes": ["XXX"],
                    "description": "Orphan section with a parent that does not exist",
                }
            ],
        },
        "token_regex": {
            "token_regex": {
                "Plant": {"pattern": "[A-Z]{3}\\d{2}", "type": "base", "position": 0},
                "PlantUnit": {"pattern": "[A-Z]{3}\\d{2}", "type": "base", "position": 1},
                "PlantSection": {
                    "pattern": "(?!BLD)[A-Z]{3}\\d{2}",
                    "type": "base",
                    "position": 2,
                },
                "Area": {"pattern": "AR\\d{2,3}", "type": "base", "position": 2},
                "Equipment": {
                    "pattern": "[A-Z]{3}\\d{2,3}[A-Z]?",
                    "type": "base",
                    "position": 3,
                },
                "Component": {
                    "pattern": "[A-Z]{1,3}\\d{2,4}[A-Z]?",
                    "type": "base",
                    "position": 4,
                },
                "TagIncremental": {"pattern": "\\d{2,4}", "type": "suffix", "position": 3},
                "PlantLayoutBuilding": {
                    "pattern": "BLD\\d{2,3}",
                    "type": "suffix",
                    "position": 2,
                },
                "LIFTCAR": {"pattern": "LIFTCAR\\d*", "type": "suffix", "position": 2},
                "Structural": {"pattern": "STRUCT", "type": "suffix"},
            }
        },
        "discipline": {
            "disciplines": {
                "ME": {"code": "ME", "designation": "Mechanical", "order": 1},
                "ST": {"code": "ST", "designation": "Structural", "order": 2},
            }
        },
        "entity": {
            "entities": {
                "SDE": {"code": "SDE", "designation": "Supplier design engineering"},
                "EXT": {"code": "EXT", "designation": "External party"},
            }
        },
        "role": {
            "roles": {
                "WORL": {"aveva_type": "WORLD", "business_concept": "Plant"},
                "SITE": {"aveva_type": "SITE", "business_concept": "PlantUnit"},
                "SUB_SITE": {"aveva_type": "SITE", "business_concept": "PlantSection"},
                "ZONE": {"aveva_type": "ZONE", "business_concept": "PlantSection"},
                "EQUI": {"aveva_type": "EQUI", "business_concept": "Component", "is_leaf": True},
                "NOZZ": {"aveva_type": "NOZZ", "business_concept": "TakeOverPoint", "is_leaf": True},
            }
        },
        "discipline_hierarchy": {
            "disciplines": {
                "DEFAULT": {
                    "hierarchy": ["WORL", "SITE", "SUB_SITE", "ZONE", "EQUI"],
                    "tokens": {
                        "WORL": {"base": ["Plant"], "suffix": ["Discipline", "Entity"]},
                        "SITE": {"base": ["Plant", "PlantUnit"], "suffix": ["Discipline", "Entity"]},
                        "SUB_SITE": {
                            "base": ["Plant", "PlantUnit", "PlantSection"],
                            "suffix": ["Discipline", "Entity"],
                        },
                        "ZONE": {
                            "base": ["Plant", "PlantUnit", "PlantSection", "Equipment"],
                            "suffix": ["Discipline", "Entity"],
                        },
                        "EQUI": {
                            "base": ["Plant", "PlantUnit", "PlantSection", "Equipment", "Component"],
                            "suffix": ["Discipline", "Entity"],
                        },
                    },
                },
                "ST": {
                    "hierarchy": ["WORL", "SITE", "ZONE", "EQUI"],
                    "tokens": {
                        "ZONE": {
                            "base": ["Plant", "PlantUnit", "PlantSection"],
                            "suffix": ["TagIncremental", "Discipline", "Entity"],
                        },
                    },
                },
            }
        },
        "catalog_reference": {
            "geometries": {
                "NOZZ": {
                    "DEFAULT": "/NOZZ-GENERIC",
                    "FLANGE": "/NOZZ-FLANGE",
                    "FLANGE_DN50": "/NOZZ-FLANGE-DN50",
                }
            }
        },
        "header_map": {
            "headings": {
                "tag": "Tag",
                "owner_model": "Owner Model",
                "description": "Description",
                "geometry_kind": "Type",
                "position_x": "Position X",
                "position_y": "Position Y",
                "position_z": "Position Z",
            }
        },
    }


@pytest.fixture
def maps_dir(temp_dir: Path, map_tables: Dict[str, Dict[str, Any]]) -> Path:
    """Write the code tables as YAML files into a maps directory."""
    directory = temp_dir / "maps"
    directory.mkdir()
    for stem, data in map_tables.items():
        with open(directory / f"{stem}.yaml", "w", encoding="utf-8") as f:
            yaml.dump(data, f)
    return directory


@pytest.fixture
def map_registry(maps_dir: Path) -> MapRegistry:
    """Registry loaded from the fixture maps directory."""
    return MapRegistry.from_directory(maps_dir)


@pytest.fixture(scope="session")
def default_maps() -> MapRegistry:
    """Registry built from the packaged code tables."""
    return MapRegistry.default()


@pytest.fixture
def quiet_logger() -> PipelineLogger:
    return PipelineLogger("ERROR", False)


@pytest.fixture
def token_engine(default_maps: MapRegistry, quiet_logger: PipelineLogger) -> TokenEngine:
    return TokenEngine(default_maps, logger=quiet_logger)


@pytest.fixture
def composer(default_maps: MapRegistry, quiet_logger: PipelineLogger) -> ComposerEngine:
    return ComposerEngine(default_maps, logger=quiet_logger)


@pytest.fixture
def identity_store_path(temp_dir: Path) -> Path:
    """Path of a not yet existing identity store file."""
    return temp_dir / "store" / "identity_store.json"
