"""Prompt templates for component, test and specification generation."""
import json
import logging
from typing import List, Optional
from orus_builder.generators.codegen.types import (
    ComponentSpec,
    GenerationContext,
    GenerationRequest,
    TechnicalSpecification,
)

log = logging.getLogger(__name__)

UI_TYPES = {"page", "component", "layout"}
BACKEND_TYPES = {"server", "api", "routes", "controller", "service"}
MODEL_TYPES = {"model", "schema", "entity"}

DEFAULT_PALETTE = ["#6366F1", "#8B5CF6"]

COMPONENT_SYSTEM_PROMPT = """You are an expert React/TypeScript code generator.

You MUST analyze the user's request carefully and generate ONLY what they asked for.

CRITICAL RULES:
1. Match the scope exactly - don't over-generate
2. If asked for "a card", generate ONE card component + minimal support files
3. If asked for "a dashboard", generate multiple components for that dashboard
4. Always use proper TypeScript types
5. Generate clean, production-ready code
6. Use modern React patterns (hooks, functional components)"""

TEST_SYSTEM_PROMPT = "You are an expert test generator. Return ONLY test code, no explanations."

SPEC_SYSTEM_PROMPT = "You are a software architect. Respond with a single JSON object and nothing else."

FILE_MARKER_FORMAT = """CRITICAL FORMAT REQUIREMENT:
You MUST use file markers for multi-file output.

Format EXACTLY like this:
// src/components/UserCard.tsx
import React from 'react';
export function UserCard() {
  return <div>User Card</div>;
}

// src/types/User.ts
export interface User {
  id: string;
  name: string;
}

RULES:
- Start each file with: // src/path/filename.ext
- Use proper folder structure (components/, types/, utils/, etc.)
- No markdown code blocks
- No explanations outside of code comments
- Just code with file markers"""

SCOPE_INSTRUCTIONS = {
    "single-component": """**SCOPE: SINGLE COMPONENT**
Generate ONLY 1-3 files maximum:
- The main component requested
- A types file if needed
- Minimal mock data (3-5 items only)

DO NOT generate multiple unrelated components, full pages or extra utility files.""",
    "page": """**SCOPE: PAGE**
Generate 3-6 files:
- Main page component
- 1-2 supporting components
- Types file
- Mock data file

Include ONLY features mentioned in the prompt.""",
    "feature": """**SCOPE: FEATURE/MODULE**
Generate 8-12 files:
- Multiple related components
- Types and interfaces
- Utility functions and hooks if needed
- Mock data

Create a cohesive feature set with proper separation of concerns.""",
    "application": """**SCOPE: FULL APPLICATION**
Generate 15-30 files:
- Complete file structure with multiple pages
- Routing setup and state management
- API integration and comprehensive types
- Full mock data set""",
}

SINGLE_COMPONENT_KEYWORDS = [
    "single component", "a component", "component with", "create a component",
    "build a component", "button", "card", "input", "select", "dropdown",
]
APPLICATION_KEYWORDS = [
    "fullstack", "full-stack", "full stack", "complete application", "application",
    "e-commerce", "ecommerce", "platform", "system",
]
FEATURE_KEYWORDS = ["module", "feature", "crud", "management", "authentication"]


def detect_scope(prompt: str) -> str:
    lower = prompt.lower()
    if any(k in lower for k in APPLICATION_KEYWORDS):
        return "application"
    if any(k in lower for k in SINGLE_COMPONENT_KEYWORDS):
        return "single-component"
    if any(k in lower for k in FEATURE_KEYWORDS):
        return "feature"
    return "page"


def scope_instructions(prompt: str) -> str:
    return SCOPE_INSTRUCTIONS[detect_scope(prompt)]


def prompt_category(component_type: str) -> str:
    lower = component_type.lower()
    if lower in UI_TYPES:
        return "ui"
    if lower in BACKEND_TYPES:
        return "backend"
    if lower in MODEL_TYPES:
        return "model"
    return "ui"


def _bullets(items: List[str], mark: str = "-") -> str:
    return "\n".join(f"{mark} {item}" for item in items) or f"{mark} Implement the component purpose"


def build_frontend_prompt(
    component: ComponentSpec,
    spec: TechnicalSpecification,
    request: GenerationRequest,
    context: Optional[GenerationContext],
) -> str:
    palette = (context.color_palette if context and context.color_palette else None) or DEFAULT_PALETTE
    secondary = palette[1] if len(palette) > 1 else palette[0]
    domain = (context.domain if context else None) or "general"
    personality = (context.personality if context else None) or "professional, modern, user-friendly"
    framework = (spec.technologies.get("frontend") or [request.framework])[0]
    opts = request.options

    styling = []
    if opts.apply_tailwind:
        styling.append("- Style exclusively with Tailwind CSS utility classes")
    if opts.responsive:
        styling.append("- Responsive layout (mobile first, md: and lg: breakpoints)")
    if opts.dark_mode:
        styling.append("- Support dark mode with dark: variants")

    return f"""Generate the {component.type} "{component.name}" for a {domain} application built with {framework} and TypeScript.

PURPOSE: {component.purpose}

RESPONSIBILITIES:
{_bullets(component.responsibilities)}

DESIGN SYSTEM:
- Primary color: {palette[0]}
- Secondary color: {secondary}
- Palette: {", ".join(palette)}
- Personality: {personality}
- Visual style: {opts.style}
{chr(10).join(styling)}

ARCHITECTURE:
- Style: {spec.architecture.style}
- Patterns: {", ".join(spec.architecture.patterns) or "component-based"}

REQUIREMENTS:
- Functional components with hooks
- Realistic mock data instead of remote calls
- Accessible markup (semantic elements, aria labels)
- Entry component exported as default from src/App.tsx"""


def build_backend_prompt(
    component: ComponentSpec,
    spec: TechnicalSpecification,
    request: GenerationRequest,
    context: Optional[GenerationContext],
) -> str:
    framework = (spec.technologies.get("backend") or ["express"])[0]
    database = (spec.technologies.get("database") or ["mongodb"])[0]
    kind = component.type.lower()

    structure = {
        "server": "Create the app, configure cors, helmet, morgan and the JSON body parser, mount /api routes, add a 404 handler and centralized error middleware, then listen on process.env.PORT.",
        "routes": "Create an express Router with GET /, GET /:id, POST /, PUT /:id and DELETE /:id bound to controller functions.",
        "controller": "Export async handlers getAll, getById, create, update and remove that validate input, call the data layer and send JSON responses with proper status codes.",
    }.get(kind, "Expose the operations listed in the responsibilities with typed inputs and outputs.")

    return f"""Generate a production-ready {framework} TypeScript {kind} file named {component.name}.ts.

Start the file with: // backend/src/{component.name}.ts

PURPOSE: {component.purpose}

RESPONSIBILITIES:
{_bullets(component.responsibilities, "•")}

STRUCTURE:
{structure}

DATA LAYER: {database}

RULES:
- TypeScript strict types throughout
- async/await for every asynchronous operation
- Never leak stack traces in responses"""


def build_model_prompt(
    component: ComponentSpec,
    spec: TechnicalSpecification,
    request: GenerationRequest,
    context: Optional[GenerationContext],
) -> str:
    database = (spec.technologies.get("database") or ["mongodb"])[0]
    name = component.name
    return f"""Generate TypeScript interface/model file named {name}.ts for {database}.

PURPOSE: {component.purpose}
RESPONSIBILITIES:
{_bullets(component.responsibilities)}

REQUIREMENTS:
- TypeScript interfaces for type safety
- Proper field types (string, number, Date, boolean) and optional fields with ?
- Timestamps (createdAt, updatedAt)
- Create{name}DTO and Update{name}DTO interfaces
- {name}Filters interface for queries

RETURN ONLY THE CODE, NO EXPLANATIONS."""


def build_component_prompt(
    component: ComponentSpec,
    spec: TechnicalSpecification,
    request: GenerationRequest,
    context: Optional[GenerationContext],
) -> str:
    """Pick the UI, backend or model template from the component type.

    Unknown types fall back to the UI template.
    """
    category = prompt_category(component.type)
    if category == "backend":
        return build_backend_prompt(component, spec, request, context)
    if category == "model":
        return build_model_prompt(component, spec, request, context)
    if component.type.lower() not in UI_TYPES:
        log.warning("Unknown component type %s, using UI template", component.type)
    return build_frontend_prompt(component, spec, request, context)


def build_generation_message(base_prompt: str, user_prompt: str) -> str:
    return f"""{base_prompt}

{scope_instructions(user_prompt)}

**USER'S ORIGINAL REQUEST:**
"{user_prompt}"

{FILE_MARKER_FORMAT}

**ANALYZE THE REQUEST ABOVE AND GENERATE ACCORDINGLY.**"""


def build_test_prompt(component: ComponentSpec, code: str, framework: str) -> str:
    runner = "Jest + React Testing Library" if framework == "react" else "Vitest"
    return f"""Generate comprehensive unit tests for this {framework} component named {component.name}.

COMPONENT CODE:
```typescript
{code}
```

GENERATE TESTS THAT:
- Test all component responsibilities
- Cover edge cases and error scenarios
- Use {runner}
- Aim for 80%+ code coverage

RETURN ONLY THE TEST CODE, NO EXPLANATIONS."""


SPEC_SCHEMA = {
    "architecture": {"style": "string", "layers": ["string"], "patterns": ["string"]},
    "components": [{"name": "string", "type": "string", "purpose": "string", "responsibilities": ["string"]}],
    "dataModel": [{"entity": "string", "attributes": ["string"], "relationships": ["string"]}],
    "technologies": {"frontend": ["string"], "backend": ["string"], "database": ["string"], "deployment": ["string"]},
    "quality": {"testingStrategy": "string", "securityRequirements": ["string"], "performanceTargets": ["string"]},
}


def build_specification_prompt(request: GenerationRequest, context: GenerationContext) -> str:
    ctx = {
        "domain": context.domain,
        "complexity": context.complexity,
        "colorPalette": context.color_palette,
        "personality": context.personality,
        "framework": request.framework,
    }
    return f"""Generate a technical specification for: "{request.prompt}"
Context: {json.dumps(ctx)}
Return a JSON object matching this schema:
{json.dumps(SPEC_SCHEMA, indent=2)}"""
