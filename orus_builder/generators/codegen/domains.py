"""Domain catalog lookups and backend scaffolding for data-driven domains."""
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional
import yaml
from orus_builder.generators.codegen.types import ComponentSpec, GenerationContext, TechnicalSpecification

log = logging.getLogger(__name__)

CATALOG_PATH = Path(__file__).with_name("domains.yaml")

BACKEND_COMPONENT_TYPES = {"server", "api", "service", "routes", "controller", "model"}


@dataclass(frozen=True)
class DomainCatalog:
    backend_required: List[str]
    frontend_only: List[str]
    entities: Dict[str, str]
    default_entity: str
    palettes: Dict[str, List[str]]
    personalities: Dict[str, str]

    def palette_for(self, domain: str) -> List[str]:
        return list(self.palettes.get(domain.lower(), self.palettes["general"]))

    def personality_for(self, domain: str) -> str:
        return self.personalities.get(domain.lower(), self.personalities["general"])

    def entity_for(self, domain: str) -> str:
        return self.entities.get(domain, self.default_entity)


@lru_cache(maxsize=None)
def load_catalog(path: Path = CATALOG_PATH) -> DomainCatalog:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return DomainCatalog(
        backend_required=list(data["backend_required"]),
        frontend_only=list(data["frontend_only"]),
        entities=dict(data["entities"]),
        default_entity=data.get("default_entity", "Item"),
        palettes={k: list(v) for k, v in data["palettes"].items()},
        personalities=dict(data["personalities"]),
    )


def needs_backend(domain: Optional[str], catalog: Optional[DomainCatalog] = None) -> bool:
    catalog = catalog or load_catalog()
    if not domain:
        return False
    lower = domain.lower()
    if any(name in lower for name in catalog.frontend_only):
        log.info("Domain %s is frontend-only", domain)
        return False
    return domain in catalog.backend_required


def backend_components(entity: str) -> List[ComponentSpec]:
    return [
        ComponentSpec(
            name="Server",
            type="server",
            purpose="Express server setup and configuration",
            responsibilities=[
                "Initialize Express application",
                "Configure middleware (cors, helmet, json parser)",
                "Mount API routes",
                "Error handling middleware",
                "Start server on port",
            ],
        ),
        ComponentSpec(
            name=f"{entity}Routes",
            type="routes",
            purpose=f"RESTful API routes for {entity} operations",
            responsibilities=[
                "GET /api/items - List all items",
                "GET /api/items/:id - Get single item by ID",
                "POST /api/items - Create new item",
                "PUT /api/items/:id - Update existing item",
                "DELETE /api/items/:id - Delete item",
            ],
        ),
        ComponentSpec(
            name=f"{entity}Controller",
            type="controller",
            purpose=f"Business logic and request handling for {entity}",
            responsibilities=[
                "Handle CRUD operations",
                "Input validation and sanitization",
                "Database interaction via services",
                "Response formatting",
                "Error handling",
            ],
        ),
        ComponentSpec(
            name=f"{entity}Model",
            type="model",
            purpose=f"Data model and TypeScript interfaces for {entity}",
            responsibilities=[
                "Define TypeScript interface",
                "Define schema structure",
                "Export types for controllers",
                "DTOs for create/update operations",
            ],
        ),
    ]


def ensure_backend_for_domain(
    spec: TechnicalSpecification,
    context: Optional[GenerationContext],
    catalog: Optional[DomainCatalog] = None,
) -> bool:
    """Append server/routes/controller/model components when the domain needs a backend.

    Mutates ``spec`` in place. Returns True only when components were added.
    """
    catalog = catalog or load_catalog()
    domain = context.domain if context else None
    if not needs_backend(domain, catalog):
        return False

    if any(c.type.lower() in BACKEND_COMPONENT_TYPES for c in spec.components):
        log.info("Backend components already present for domain %s", domain)
        return False

    entity = catalog.entity_for(domain)
    spec.components.extend(backend_components(entity))
    if not spec.technologies.get("backend"):
        spec.technologies["backend"] = ["express", "typescript"]
    if not spec.technologies.get("database"):
        spec.technologies["database"] = ["mongodb", "mongoose"]

    log.info("Added backend components for %s (entity %s)", domain, entity)
    return True
