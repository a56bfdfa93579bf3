"""Simple string templates for project scaffolding files and fallbacks."""
import json
from typing import List
from orus_builder.generators.codegen.types import GeneratedComponent, GenerationContext, TechnicalSpecification

BACKEND_TYPES = {"server", "service", "routes", "controller"}


def _has_backend(spec: TechnicalSpecification) -> bool:
    return bool(spec.technologies.get("backend")) or any(c.type.lower() in BACKEND_TYPES for c in spec.components)


def render_package_json(project_id: str, framework: str, spec: TechnicalSpecification, apply_tailwind: bool = True) -> str:
    """Generate package.json content.

    Args:
        project_id: Used as the package name
        framework: ``react`` (Vite) or ``next``
        spec: Merged specification; backend and testing strategy add dependencies
        apply_tailwind: Add Tailwind CSS tooling
    """
    dependencies = {
        "react": "^18.2.0",
        "react-dom": "^18.2.0",
    }
    dev_dependencies = {
        "@types/react": "^18.2.0",
        "@types/react-dom": "^18.2.0",
        "typescript": "^5.3.0",
    }

    if framework == "next":
        dependencies["next"] = "^14.0.0"
        scripts = {
            "dev": "next dev",
            "build": "next build",
            "start": "next start",
            "lint": "next lint",
        }
    else:
        dev_dependencies["vite"] = "^5.0.0"
        dev_dependencies["@vitejs/plugin-react"] = "^4.2.0"
        scripts = {
            "dev": "vite",
            "build": "tsc && vite build",
            "preview": "vite preview",
            "lint": "eslint . --ext ts,tsx",
        }

    if apply_tailwind:
        dev_dependencies["tailwindcss"] = "^3.4.0"
        dev_dependencies["postcss"] = "^8.4.0"
        dev_dependencies["autoprefixer"] = "^10.4.0"

    if _has_backend(spec):
        dependencies["express"] = "^4.18.2"
        dependencies["cors"] = "^2.8.5"
        dependencies["helmet"] = "^7.1.0"
        dependencies["morgan"] = "^1.10.0"
        dependencies["dotenv"] = "^16.3.1"
        dependencies["mongoose"] = "^8.0.0"
        dev_dependencies["@types/express"] = "^4.17.21"
        dev_dependencies["@types/cors"] = "^2.8.17"
        dev_dependencies["tsx"] = "^4.7.0"
        scripts["server"] = "tsx backend/src/Server.ts"

    if spec.quality.testing_strategy != "none":
        dev_dependencies["vitest"] = "^1.0.0"
        dev_dependencies["@testing-library/react"] = "^14.1.0"
        dev_dependencies["@testing-library/jest-dom"] = "^6.1.0"
        dev_dependencies["jsdom"] = "^23.0.0"
        scripts["test"] = "vitest"

    package = {
        "name": project_id,
        "version": "1.0.0",
        "description": "Generated by ORUS Builder",
        "type": "module",
        "scripts": scripts,
        "dependencies": dependencies,
        "devDependencies": dev_dependencies,
    }
    return json.dumps(package, indent=2)


def render_readme(
    project_id: str,
    prompt: str,
    spec: TechnicalSpecification,
    context: GenerationContext,
    components: List[GeneratedComponent],
) -> str:
    """Generate README.md content."""
    lines = [
        f"# {project_id}",
        "",
        "Generated by ORUS Builder.",
        "",
        "## Overview",
        "",
        f"> {prompt}",
        "",
        "## Architecture",
        "",
        f"- Style: {spec.architecture.style}",
        f"- Layers: {', '.join(spec.architecture.layers) or 'n/a'}",
        f"- Patterns: {', '.join(spec.architecture.patterns) or 'n/a'}",
        "",
        "### Components",
        "",
    ]
    for c in components:
        lines.append(f"- `{c.path}` ({c.type})")

    lines.extend([
        "",
        "## Getting Started",
        "",
        "```bash",
        "npm install",
        "npm run dev",
        "```",
        "",
        "## Tech Stack",
        "",
    ])
    for layer, names in spec.technologies.items():
        lines.append(f"- **{layer}**: {', '.join(names)}")

    lines.extend([
        "",
        "## Design Context",
        "",
        f"- Domain: {context.domain or 'general'}",
        f"- Personality: {context.personality or 'n/a'}",
        f"- Palette: {', '.join(context.color_palette or [])}",
        "",
        "## License",
        "",
        "MIT",
        "",
    ])
    return "\n".join(lines)


def render_vite_config() -> str:
    """Generate vite.config.ts content."""
    return """import { defineConfig } from 'vite';
import react from '@vitejs/plugin-react';

export default defineConfig({
  plugins: [react()],
  server: { port: 5173 },
});
"""


def render_index_html(title: str) -> str:
    """Generate index.html content."""
    return f"""<!doctype html>
<html lang="en">
  <head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>{title}</title>
  </head>
  <body>
    <div id="root"></div>
    <script type="module" src="/src/main.tsx"></script>
  </body>
</html>
"""


def render_fallback_test(name: str) -> str:
    """Template test file used when test generation fails."""
    return f"""import {{ describe, it, expect }} from 'vitest';
import {{ render, screen }} from '@testing-library/react';
import {{ {name} }} from './{name}';

describe('{name}', () => {{
  it('should render without crashing', () => {{
    render(<{name} />);
    expect(screen).toBeDefined();
  }});
}});
"""


def render_fallback_app(prompt: str, palette: List[str]) -> str:
    """Minimal App component used when the generation loop produced nothing."""
    primary = palette[0] if palette else "#3B82F6"
    safe_prompt = prompt
    for old, new in (("{", "("), ("}", ")"), ("<", "&lt;"), (">", "&gt;")):
        safe_prompt = safe_prompt.replace(old, new)
    return f"""import React from 'react';

function App() {{
  return (
    <div className="min-h-screen flex items-center justify-center p-8">
      <div className="max-w-xl text-center">
        <h1 className="text-3xl font-bold mb-4" style={{{{ color: '{primary}' }}}}>
          Your application
        </h1>
        <p className="text-gray-600">{safe_prompt}</p>
      </div>
    </div>
  );
}}

export default App;
"""
