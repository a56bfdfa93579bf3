"""Tests for the cognitive generation engine with a scripted chat client."""
import asyncio
import json
from unittest.mock import patch
from conftest import DASHBOARD_SPEC, FakeLLM
from orus_builder.core.llm import LLMError
from orus_builder.core.registry import ServiceRegistry
from orus_builder.generators.codegen.generator import component_quality, quality_score
from orus_builder.generators.codegen.types import (
    ComponentMetadata,
    GeneratedComponent,
    GenerationContext,
    GenerationOptions,
    GenerationRequest,
)
from orus_builder.generators.codegen.writer import project_files, write_files


def _request(prompt: str = "Dashboard with sales chart", **kwargs) -> GenerationRequest:
    return GenerationRequest(request_id="gen-test", user_id="u1", project_id="sales-app", prompt=prompt, **kwargs)


def _generate(llm: FakeLLM, request: GenerationRequest):
    services = ServiceRegistry.default(llm=llm)
    return services, asyncio.run(services.generator.generate(request))


def test_dashboard_end_to_end():
    """Test a full run: analysis, one component split into two files, scaffolding and storage."""
    llm = FakeLLM()
    services, result = _generate(llm, _request())

    assert result.ok, f"Generation failed: {result.error}"
    generation = result.value
    assert [c.path for c in generation.components] == [
        "src/pages/SalesDashboard.tsx",
        "src/components/SalesChart.tsx",
    ]
    dashboard, chart = generation.components
    assert "useState('month')" in dashboard.code, "Hook generics should be repaired"
    assert "export function" not in chart.code
    assert chart.dependencies == ["react", "recharts"]

    assert generation.metrics.total_components == 2
    assert generation.metrics.total_lines == dashboard.metadata.lines_of_code + chart.metadata.lines_of_code
    assert generation.metrics.tests_generated == 0
    assert 0 <= generation.quality_score <= 100

    package = json.loads(generation.package_json)
    assert package["name"] == "sales-app"
    assert package["description"] == "Generated by ORUS Builder"
    assert "vitest" in package["devDependencies"]
    assert "express" not in package["dependencies"], "General domain has no backend"
    assert "## Getting Started" in generation.readme

    assert services.store.get("gen-test") is generation
    systems = [call["system"] for call in llm.calls]
    assert len(systems) == 2, "One analysis call and one component call expected"


def test_each_split_file_keeps_its_default_export():
    """Test that a response with several files keeps every file's default export."""
    code = "\n".join([
        "// src/components/Card.tsx",
        "import React from 'react';",
        "export default function Card() { return <div />; }",
        "// src/pages/Home.tsx",
        "import React from 'react';",
        "export default function Home() { return <main />; }",
    ])
    _, result = _generate(FakeLLM(code=code), _request())

    assert result.ok
    files = {c.path: c.code for c in result.value.components}
    assert list(files) == ["src/components/Card.tsx", "src/pages/Home.tsx"]
    assert "export default function Card()" in files["src/components/Card.tsx"]
    assert "export default function Home()" in files["src/pages/Home.tsx"]


def test_escaping_marker_is_written_inside_output_dir(tmp_path):
    """Test that a marker with parent references is kept inside the written project."""
    _, result = _generate(FakeLLM(code="// ../../escaped.ts\nconst x = 1;\n"), _request())

    assert result.ok
    assert [c.path for c in result.value.components] == ["src/components/escaped.ts"]

    out_dir = tmp_path / "a" / "b"
    written = write_files(project_files(result.value), out_dir)
    assert all(out_dir in p.parents for p in written)
    assert not (tmp_path / "escaped.ts").exists()


def test_component_names_cannot_climb_out_of_project():
    """Test that a component name with parent references still maps to a project path."""
    spec = {**DASHBOARD_SPEC, "components": [{"name": "../../Outside", "type": "page"}]}
    _, result = _generate(FakeLLM(spec=spec, code="export default function Outside() { return null; }"), _request())

    assert result.ok
    for component in result.value.components:
        parts = component.path.split("/")
        assert ".." not in parts and parts[0] != "", component.path


def test_analysis_failure_uses_fallback():
    """Test that a failing analysis falls back to the single App component."""
    llm = FakeLLM(spec=LLMError("rate limited"), code="export default function App() { return <main />; }")
    _, result = _generate(llm, _request())

    assert result.ok
    generation = result.value
    assert generation.specification.architecture.style == "layered"
    assert generation.specification.architecture.patterns == ["component-based", "hooks"]
    assert [c.name for c in generation.components] == ["App"]
    assert generation.components[0].path == "src/components/App.tsx"


def test_all_components_failing_gives_fallback_app():
    """Test that an empty generation loop yields the fallback App page."""
    llm = FakeLLM(code=LLMError("timeout"))
    _, result = _generate(llm, _request())

    assert result.ok
    components = result.value.components
    assert len(components) == 1
    assert components[0].path == "src/App.tsx"
    assert components[0].type == "page"
    assert "Dashboard with sales chart" in components[0].code


def test_backend_domain_adds_server_files():
    """Test that a data-driven domain generates backend files and express dependencies."""
    llm = FakeLLM(code="const handler = 1;")
    request = _request("Online shop", context=GenerationContext(domain="e_commerce"))
    _, result = _generate(llm, request)

    assert result.ok
    paths = [c.path for c in result.value.components]
    assert "backend/src/Server.ts" in paths
    assert "backend/src/ProductRoutes.ts" in paths
    assert "backend/src/ProductController.ts" in paths
    assert "src/models/ProductModel.tsx" in paths
    assert len(paths) == 5
    assert "express" in json.loads(result.value.package_json)["dependencies"]


def test_test_generation_falls_back_to_template():
    """Test that a failing test call produces the template test file."""
    llm = FakeLLM(tests=LLMError("boom"))
    _, result = _generate(llm, _request(options=GenerationOptions(include_tests=True)))

    assert result.ok
    dashboard = result.value.components[0]
    assert "should render without crashing" in dashboard.tests
    assert dashboard.metadata.coverage == 80
    assert result.value.metrics.tests_generated == 1


def test_generated_tests_use_test_prompt():
    """Test that test generation asks with the test system prompt and a smaller token budget."""
    llm = FakeLLM()
    _, result = _generate(llm, _request(options=GenerationOptions(include_tests=True)))

    assert result.value.components[0].tests == "it('works', () => {});"
    test_calls = [c for c in llm.calls if "test generator" in c["system"]]
    assert len(test_calls) == 1
    assert test_calls[0]["max_tokens"] == 2000


def test_unexpected_error_becomes_recoverable():
    """Test that an unexpected exception is returned as a localized GENERATION_FAILED error."""
    llm = FakeLLM()
    with patch("orus_builder.generators.codegen.generator.merge_specifications", side_effect=RuntimeError("boom")):
        services, result = _generate(llm, _request())

    assert not result.ok
    assert result.error.code == "GENERATION_FAILED"
    assert result.error.message["pt_BR"] == "Falha ao gerar código"
    assert result.error.details["error"] == {"type": "RuntimeError", "message": "boom"}
    assert len(services.store) == 0


def test_quality_score():
    """Test per-component scoring and the rounded mean."""
    def component(complexity, deps, tests=None, coverage=0):
        return GeneratedComponent(
            id="c", name="c", type="component", path="src/c.tsx", code="", tests=tests, dependencies=deps,
            metadata=ComponentMetadata(lines_of_code=1, complexity=complexity, coverage=coverage),
        )

    messy = component(30, [])
    tested = component(1, ["react"], tests="it()", coverage=80)
    bare = component(1, [])

    assert component_quality(messy) == 65
    assert component_quality(tested) == 100
    assert component_quality(bare) == 95
    assert quality_score([messy, bare]) == 80
    assert quality_score([]) == 0
