"""Tests for specification merging, fallbacks, prompt analysis and architecture advice."""
import asyncio
import pytest
from conftest import FakeLLM
from orus_builder.generators.codegen.analysis import (
    ArchitectureAdvisor,
    PromptAnalyzer,
    extract_json,
    specification_from_dict,
)
from orus_builder.generators.codegen.spec_merge import fallback_advice, fallback_analysis, merge_specifications
from orus_builder.generators.codegen.types import (
    Architecture,
    ArchitectureAdvice,
    ComponentSpec,
    GenerationContext,
    GenerationOptions,
    GenerationRequest,
    PromptAnalysis,
    QualitySettings,
    TechnicalSpecification,
)
from orus_builder.prompt.context import ContextAnalyzer, SessionContextStore


def _request(prompt: str = "Dashboard with sales chart", **kwargs) -> GenerationRequest:
    return GenerationRequest(request_id="gen-1", user_id="u1", project_id="p1", prompt=prompt, **kwargs)


def _prompt_spec() -> TechnicalSpecification:
    return TechnicalSpecification(
        architecture=Architecture(style="layered", layers=["ui"], patterns=["component-based"]),
        components=[ComponentSpec(name="Dashboard", type="page", purpose="Show data")],
        technologies={"frontend": ["react"], "backend": ["express"]},
    )


def test_merge_caller_patterns_win_and_advice_sets_style():
    """Test precedence: caller patterns over prompt, advice style and layers over prompt."""
    caller = TechnicalSpecification(architecture=Architecture(style="", layers=[], patterns=["custom"]))
    advice = ArchitectureAdvice(style="modular", layers=["presentation", "api", "data"])

    merged = merge_specifications(_prompt_spec(), advice, caller)

    assert merged.architecture.patterns == ["custom"]
    assert merged.architecture.style == "modular"
    assert merged.architecture.layers == ["presentation", "api", "data"]
    assert [c.name for c in merged.components] == ["Dashboard"], "Caller has no components, prompt ones are kept"


def test_merge_caller_architecture_overrides_advice():
    """Test that a caller style and layers beat the advice."""
    caller = TechnicalSpecification(architecture=Architecture(style="hexagonal", layers=["core", "adapters"]))
    merged = merge_specifications(_prompt_spec(), fallback_advice(), caller)
    assert merged.architecture.style == "hexagonal"
    assert merged.architecture.layers == ["core", "adapters"]
    assert merged.architecture.patterns == ["component-based"]


def test_merge_technologies_and_quality():
    """Test per-layer technology merge and caller quality."""
    caller = TechnicalSpecification(
        technologies={"frontend": ["vue"]},
        quality=QualitySettings(testing_strategy="none"),
    )
    merged = merge_specifications(_prompt_spec(), fallback_advice(), caller)
    assert merged.technologies == {"frontend": ["vue"], "backend": ["express"]}
    assert merged.quality.testing_strategy == "none"


def test_merge_default_components_and_purpose():
    """Test the default App component and purpose fallbacks."""
    empty = TechnicalSpecification()
    merged = merge_specifications(empty, fallback_advice())
    assert [(c.name, c.type) for c in merged.components] == [("App", "page")]

    caller = TechnicalSpecification(components=[
        ComponentSpec(name="List", type="component", responsibilities=["Show rows", "Paginate"]),
        ComponentSpec(name="Empty", type="component"),
    ])
    merged = merge_specifications(empty, fallback_advice(), caller)
    assert merged.components[0].purpose == "Show rows"
    assert merged.components[1].purpose == "Component functionality"
    assert caller.components[0].purpose == "", "Inputs must not be modified"


def test_fallback_analysis():
    """Test the deterministic analysis used when the analyzer fails."""
    analysis = fallback_analysis(_request(framework="next", options=GenerationOptions(complexity="simple")))
    spec = analysis.specification
    assert spec.architecture.style == "layered"
    assert spec.architecture.layers == ["presentation", "business", "data"]
    assert spec.architecture.patterns == ["component-based", "hooks"]
    assert [(c.name, c.type) for c in spec.components] == [("App", "component")]
    assert spec.technologies == {"frontend": ["next", "typescript"]}
    assert spec.quality.testing_strategy == "unit"
    assert analysis.context.complexity == "simple"


def test_extract_json_and_parse_specification():
    """Test JSON extraction from prose and camelCase parsing."""
    text = 'Here you go:\n```json\n{"components": [{"name": "Cart", "type": "page"}, {"type": "nameless"}],' \
           ' "dataModel": [{"entity": "Item"}], "quality": {"testingStrategy": "e2e"}}\n```'
    spec = specification_from_dict(extract_json(text))
    assert [c.name for c in spec.components] == ["Cart"]
    assert spec.data_model[0].entity == "Item"
    assert spec.quality.testing_strategy == "e2e"
    assert spec.architecture.style == "layered"

    with pytest.raises(ValueError):
        extract_json("no json here")


def test_prompt_analyzer_enriches_context():
    """Test domain detection, palette and personality from the catalog."""
    analyzer = PromptAnalyzer(FakeLLM(), ContextAnalyzer(SessionContextStore()))
    analysis = asyncio.run(analyzer.analyze(_request("Patient portal for a clinic")))

    assert analysis.context.domain == "healthcare"
    assert analysis.context.color_palette[0] == "#14B8A6"
    assert analysis.context.personality.startswith("calm")
    assert analysis.specification.components[0].name == "SalesDashboard"


def test_prompt_analyzer_keeps_caller_context():
    """Test that a caller-supplied domain and palette are kept."""
    analyzer = PromptAnalyzer(FakeLLM(), ContextAnalyzer(SessionContextStore()))
    request = _request(context=GenerationContext(domain="fitness", color_palette=["#000000"]))
    context = analyzer.build_context(request)
    assert context.domain == "fitness"
    assert context.color_palette == ["#000000"]
    assert context.personality.startswith("energetic")


def test_prompt_analyzer_propagates_bad_reply():
    """Test that an unparsable model reply raises."""
    analyzer = PromptAnalyzer(FakeLLM(spec="not json"), ContextAnalyzer(SessionContextStore()))
    with pytest.raises(ValueError):
        asyncio.run(analyzer.analyze(_request()))


def test_architecture_advisor():
    """Test layers from the domain and style from the complexity."""
    advisor = ArchitectureAdvisor()

    def analysis(domain, complexity):
        return PromptAnalysis(
            specification=TechnicalSpecification(),
            context=GenerationContext(domain=domain, complexity=complexity),
        )

    shop = advisor.advise(_request(), analysis("e_commerce", "medium"))
    assert shop.style == "layered"
    assert shop.layers == ["presentation", "api", "business", "data"]

    big = advisor.advise(_request(), analysis("general", "enterprise"))
    assert big.style == "modular"
    assert big.layers == ["presentation", "business", "data"]
