"""Tests for codegen utilities, the domain catalog and prompt templates."""
from orus_builder.generators.codegen.domains import ensure_backend_for_domain, load_catalog, needs_backend
from orus_builder.generators.codegen.prompts import (
    DEFAULT_PALETTE,
    build_component_prompt,
    build_generation_message,
    detect_scope,
)
from orus_builder.generators.codegen.types import (
    ComponentSpec,
    GenerationContext,
    GenerationRequest,
    TechnicalSpecification,
)
from orus_builder.generators.codegen.utils import (
    calculate_complexity,
    extract_dependencies,
    generate_path,
    to_pascal_case,
)


def _spec(*components: ComponentSpec) -> TechnicalSpecification:
    return TechnicalSpecification(components=list(components))


def _request(prompt: str = "Dashboard with sales chart") -> GenerationRequest:
    return GenerationRequest(request_id="gen-1", user_id="u1", project_id="p1", prompt=prompt)


def test_utils():
    """Test naming, dependency, complexity and path helpers."""
    assert to_pascal_case("user-profile card") == "UserProfileCard"
    code = "\n".join([
        "import React from 'react';",
        "import { api } from './api';",
        "import axios from 'axios';",
        "import { useState } from 'react';",
    ])
    assert extract_dependencies(code) == ["react", "axios"]
    assert calculate_complexity("if (a && b) { x(); } else if (c) { y(); }") == 5
    assert generate_path("Dashboard", "page") == "src/pages/Dashboard.tsx"
    assert generate_path("Dashboard", "page", "next") == "src/app/pages/Dashboard.tsx"
    assert generate_path("Gizmo", "unknown") == "src/components/Gizmo.tsx"


def test_catalog_lookups():
    """Test palette, personality and entity fallbacks."""
    catalog = load_catalog()
    assert catalog.palette_for("nowhere") == catalog.palette_for("general")
    assert catalog.personality_for("healthcare").startswith("calm")
    assert catalog.entity_for("e_commerce") == "Product"
    assert catalog.entity_for("nowhere") == "Item"
    assert needs_backend("fintech")
    assert not needs_backend("portfolio")
    assert not needs_backend(None)


def test_ensure_backend_without_domain():
    """Test that no context or a frontend domain adds nothing."""
    spec = _spec(ComponentSpec(name="App", type="page"))
    assert ensure_backend_for_domain(spec, None) is False
    assert ensure_backend_for_domain(spec, GenerationContext(domain="general")) is False
    assert ensure_backend_for_domain(spec, GenerationContext(domain="portfolio")) is False
    assert len(spec.components) == 1


def test_ensure_backend_for_data_domain():
    """Test that a backend-required domain gets the four backend components."""
    spec = _spec(ComponentSpec(name="App", type="page"))
    added = ensure_backend_for_domain(spec, GenerationContext(domain="e_commerce"))

    assert added is True
    assert [c.name for c in spec.components] == [
        "App", "Server", "ProductRoutes", "ProductController", "ProductModel",
    ]
    assert [c.type for c in spec.components[1:]] == ["server", "routes", "controller", "model"]
    assert spec.technologies["backend"] == ["express", "typescript"]
    assert spec.technologies["database"] == ["mongodb", "mongoose"]


def test_ensure_backend_keeps_existing_backend():
    """Test that an existing backend component (any case) blocks the addition."""
    spec = _spec(ComponentSpec(name="App", type="page"), ComponentSpec(name="Orders", type="API"))
    assert ensure_backend_for_domain(spec, GenerationContext(domain="e_commerce")) is False
    assert len(spec.components) == 2


def test_ensure_backend_keeps_chosen_technologies():
    """Test that technologies already set are not overwritten."""
    spec = _spec(ComponentSpec(name="App", type="page"))
    spec.technologies["backend"] = ["fastify"]
    assert ensure_backend_for_domain(spec, GenerationContext(domain="crm")) is True
    assert spec.technologies["backend"] == ["fastify"]
    assert spec.components[2].name == "ContactRoutes"


def test_component_prompt_categories():
    """Test template selection by component type."""
    spec = _spec()
    request = _request()
    context = GenerationContext(domain="fintech", color_palette=["#8B5CF6", "#F59E0B"], personality="secure")

    ui = build_component_prompt(ComponentSpec(name="Wallet", type="Page"), spec, request, context)
    assert "DESIGN SYSTEM" in ui
    assert "Primary color: #8B5CF6" in ui

    backend = build_component_prompt(ComponentSpec(name="Server", type="server"), spec, request, context)
    assert "production-ready express TypeScript server file named Server.ts" in backend
    assert "// backend/src/Server.ts" in backend

    model = build_component_prompt(ComponentSpec(name="TxModel", type="entity"), spec, request, context)
    assert "Generate TypeScript interface/model file named TxModel.ts" in model
    assert "CreateTxModelDTO" in model

    unknown = build_component_prompt(ComponentSpec(name="Gizmo", type="widget"), spec, request, context)
    assert "DESIGN SYSTEM" in unknown, "Unknown types fall back to the UI template"


def test_component_prompt_default_palette():
    """Test that a missing palette degrades to the default colors."""
    text = build_component_prompt(ComponentSpec(name="App", type="page"), _spec(), _request(), None)
    for color in DEFAULT_PALETTE:
        assert color in text


def test_scope_detection():
    """Test scope keywords and the generation message layout."""
    assert detect_scope("Create a button") == "single-component"
    assert detect_scope("Build an e-commerce platform") == "application"
    assert detect_scope("User management module") == "feature"
    assert detect_scope("Dashboard with sales chart") == "page"

    message = build_generation_message("BASE", "Dashboard with sales chart")
    assert message.startswith("BASE")
    assert "**SCOPE: PAGE**" in message
    assert '"Dashboard with sales chart"' in message
    assert "CRITICAL FORMAT REQUIREMENT" in message


def test_ensure_backend_leaves_empty_frontend_spec_unchanged():
    """Test that an empty specification in a frontend-only domain is untouched."""
    spec = TechnicalSpecification()
    assert ensure_backend_for_domain(spec, GenerationContext(domain="landing_page")) is False
    assert spec.components == []
    assert spec.technologies == {}
