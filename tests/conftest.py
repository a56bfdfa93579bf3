"""Shared fixtures: a scripted chat client, prompt pipeline and an in-memory database."""
import json
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from orus_builder.core.engine import PromptProcessor
from orus_builder.core.llm import ChatResponse, LLMError
from orus_builder.core.registry import ServiceRegistry
from orus_builder.db import models  # noqa
from orus_builder.db.session import Base
from orus_builder.generators.codegen.prompts import COMPONENT_SYSTEM_PROMPT, SPEC_SYSTEM_PROMPT, TEST_SYSTEM_PROMPT
from orus_builder.prompt.ambiguity import AmbiguityResolver
from orus_builder.prompt.context import ContextAnalyzer, SessionContextStore
from orus_builder.prompt.conversation import ConversationManager
from orus_builder.prompt.history import PromptHistory
from orus_builder.prompt.intent import IntentClassifier
from orus_builder.prompt.parser import NaturalLanguageParser
from orus_builder.prompt.requirements import RequirementsExtractor
from orus_builder.prompt.validator import PromptValidator

DASHBOARD_SPEC = {
    "architecture": {"style": "layered", "layers": ["presentation", "data"], "patterns": ["component-based"]},
    "components": [
        {
            "name": "SalesDashboard",
            "type": "page",
            "purpose": "Show sales figures",
            "responsibilities": ["Render KPI cards", "Render sales chart"],
        },
    ],
    "dataModel": [{"entity": "Sale", "attributes": ["amount", "date"], "relationships": []}],
    "technologies": {"frontend": ["react", "typescript"]},
    "quality": {"testingStrategy": "unit", "securityRequirements": [], "performanceTargets": []},
}

DASHBOARD_CODE = """// src/pages/SalesDashboard.tsx
import React from 'react';
import { SalesChart } from '../components/SalesChart';

export default function SalesDashboard() {
  const [range, setRange] = React.useState<string>('month');
  return <SalesChart range={range} />;
}

// src/components/SalesChart.tsx
import React from 'react';
import { LineChart } from 'recharts';

export function SalesChart({ range }: { range: string }) {
  return range ? <LineChart width={400} height={300} /> : null;
}
"""


class FakeLLM:
    """Chat client that answers by system prompt.

    Each reply is a string or an exception instance, which is raised.
    """
    def __init__(self, spec=None, code=DASHBOARD_CODE, tests="it('works', () => {});"):
        spec = DASHBOARD_SPEC if spec is None else spec
        self.replies = {
            SPEC_SYSTEM_PROMPT: spec if isinstance(spec, (str, Exception)) else json.dumps(spec),
            COMPONENT_SYSTEM_PROMPT: code,
            TEST_SYSTEM_PROMPT: tests,
        }
        self.calls = []

    async def chat(self, messages, temperature=0.3, max_tokens=4000):
        system = messages[0].content
        self.calls.append({"system": system, "user": messages[-1].content, "max_tokens": max_tokens})
        reply = self.replies.get(system)
        if reply is None:
            raise LLMError("unexpected prompt")
        if isinstance(reply, Exception):
            raise reply
        return ChatResponse(content=reply, model="fake")


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def services(fake_llm):
    return ServiceRegistry.default(llm=fake_llm)


@pytest.fixture
def processor():
    sessions = SessionContextStore()
    return PromptProcessor(
        parser=NaturalLanguageParser(),
        classifier=IntentClassifier(),
        validator=PromptValidator(),
        sessions=sessions,
        context_analyzer=ContextAnalyzer(sessions),
        ambiguity=AmbiguityResolver(),
        requirements=RequirementsExtractor(),
        conversation=ConversationManager(sessions),
        history=PromptHistory(),
    )


@pytest.fixture
def db_sessionmaker():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False)
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def client(services, db_sessionmaker):
    from fastapi.testclient import TestClient
    from orus_builder.api.deps import get_services
    from orus_builder.db.session import get_db
    from orus_builder.main import app

    def override_db():
        db = db_sessionmaker()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_services] = lambda: services
    app.dependency_overrides[get_db] = override_db
    # no context manager: the lifespan (database wait, migrations) is not run
    yield TestClient(app)
    app.dependency_overrides.clear()
