"""Tests for the dashboard project endpoints and the regeneration task."""
from unittest.mock import patch
from orus_builder.db.models import Project
from orus_builder.tasks.projects import regenerate_project, request_for

PROJECT = {
    "name": "Sales app",
    "description": "Sales dashboard",
    "prompt": "Dashboard with sales chart",
    "metadata": {"options": {"includeTests": True}},
}


def _create(client, **overrides):
    response = client.post("/api/dashboard/projects", json={**PROJECT, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


def test_create_and_get_project(client):
    """Test creation defaults and camelCase serialization."""
    body = _create(client)
    project = body["project"]

    assert body["success"] is True
    assert body["projectId"].startswith("proj-")
    assert project["id"] == body["projectId"]
    assert project["userId"] == "demo-user"
    assert project["status"] == "generated"
    assert project["version"] == 1
    assert project["metadata"] == PROJECT["metadata"]

    fetched = client.get(f"/api/dashboard/projects/{body['projectId']}")
    assert fetched.status_code == 200
    assert fetched.json()["project"]["name"] == "Sales app"


def test_projects_are_scoped_to_user(client):
    """Test that another user cannot see the project."""
    project_id = _create(client)["projectId"]
    response = client.get(f"/api/dashboard/projects/{project_id}", params={"userId": "someone-else"})
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "PROJECT_NOT_FOUND"


def test_list_with_filter_and_pagination(client):
    """Test status filtering and the pagination block."""
    first = _create(client, name="One")["projectId"]
    _create(client, name="Two")
    _create(client, name="Three")
    client.put(f"/api/dashboard/projects/{first}", json={"status": "draft"})

    page = client.get("/api/dashboard/projects", params={"limit": 2}).json()
    assert len(page["projects"]) == 2
    assert page["pagination"] == {"total": 3, "limit": 2, "skip": 0, "hasMore": True}

    drafts = client.get("/api/dashboard/projects", params={"status": "draft"}).json()
    assert [p["name"] for p in drafts["projects"]] == ["One"]
    assert drafts["pagination"]["hasMore"] is False


def test_update_project(client):
    """Test partial updates, including metadata."""
    project_id = _create(client)["projectId"]
    response = client.put(f"/api/dashboard/projects/{project_id}", json={
        "name": "Renamed",
        "metadata": {"tags": ["sales"]},
    })
    assert response.status_code == 200
    project = response.json()["project"]
    assert project["name"] == "Renamed"
    assert project["description"] == "Sales dashboard", "Fields not sent are kept"
    assert project["metadata"] == {"tags": ["sales"]}

    invalid = client.put(f"/api/dashboard/projects/{project_id}", json={"status": "archived"})
    assert invalid.status_code == 422


def test_update_ignores_null_fields(client, services, db_sessionmaker):
    """Test that explicit nulls leave stored values untouched and regeneration still works."""
    project_id = _create(client)["projectId"]
    response = client.put(f"/api/dashboard/projects/{project_id}", json={
        "name": None,
        "framework": None,
        "language": None,
        "metadata": None,
        "description": "Updated",
    })
    assert response.status_code == 200, response.text
    project = response.json()["project"]
    assert project["name"] == "Sales app"
    assert project["language"] == "typescript"
    assert project["metadata"] == PROJECT["metadata"]
    assert project["description"] == "Updated"

    with patch("orus_builder.tasks.projects.SessionLocal", db_sessionmaker):
        regenerate_project(project_id, services=services)

    with db_sessionmaker() as db:
        assert db.get(Project, project_id).status == "generated"


def test_soft_delete(client, db_sessionmaker):
    """Test that a deleted project disappears from the API but stays in the table."""
    project_id = _create(client)["projectId"]

    response = client.delete(f"/api/dashboard/projects/{project_id}")
    assert response.status_code == 200
    assert response.json()["success"] is True

    assert client.get(f"/api/dashboard/projects/{project_id}").status_code == 404
    assert client.delete(f"/api/dashboard/projects/{project_id}").status_code == 404
    assert client.get("/api/dashboard/projects").json()["pagination"]["total"] == 0

    with db_sessionmaker() as db:
        assert db.get(Project, project_id).is_deleted is True


def test_stats(client):
    """Test totals, per-status counts and recent projects."""
    ids = [_create(client, name=f"P{i}")["projectId"] for i in range(3)]
    client.put(f"/api/dashboard/projects/{ids[0]}", json={"status": "deployed"})
    client.delete(f"/api/dashboard/projects/{ids[1]}")
    _create(client, name="Other user", userId="u2")

    stats = client.get("/api/dashboard/stats").json()["stats"]
    assert stats["totalProjects"] == 2
    assert stats["byStatus"] == {"draft": 0, "generated": 1, "deployed": 1}
    assert {p["id"] for p in stats["recentProjects"]} == {ids[0], ids[2]}


def test_regenerate_enqueues_task(client):
    """Test that regeneration marks the project and enqueues the worker task."""
    project_id = _create(client)["projectId"]

    with patch("orus_builder.api.routes_dashboard.regenerate_project") as task:
        response = client.post(f"/api/dashboard/projects/{project_id}/regenerate")

    assert response.status_code == 202
    assert response.json() == {"success": True, "projectId": project_id, "status": "generating"}
    task.delay.assert_called_once_with(project_id)
    assert client.get(f"/api/dashboard/projects/{project_id}").json()["project"]["status"] == "generating"


def test_regenerate_task_stores_files(client, services, db_sessionmaker):
    """Test the worker task end to end with the scripted chat client."""
    project_id = _create(client)["projectId"]

    with patch("orus_builder.tasks.projects.SessionLocal", db_sessionmaker):
        regenerate_project(project_id, services=services)

    with db_sessionmaker() as db:
        project = db.get(Project, project_id)
        assert project.status == "generated"
        assert project.version == 2
        assert project.error_message is None
        assert [f["path"] for f in project.files] == [
            "src/pages/SalesDashboard.tsx", "src/components/SalesChart.tsx",
        ]
        assert project.generation_data["projectId"] == project_id
        assert "files" not in project.generation_data


def test_regenerate_task_records_failure(client, services, db_sessionmaker):
    """Test that a failed generation marks the project as failed."""
    project_id = _create(client)["projectId"]

    with patch("orus_builder.tasks.projects.SessionLocal", db_sessionmaker), \
            patch("orus_builder.generators.codegen.generator.merge_specifications", side_effect=RuntimeError("boom")):
        regenerate_project(project_id, services=services)

    with db_sessionmaker() as db:
        project = db.get(Project, project_id)
        assert project.status == "failed"
        assert project.error_message == "Failed to generate code"
        assert project.generation_data["error"]["code"] == "GENERATION_FAILED"
        assert project.version == 1


def test_request_for_project():
    """Test the generation request built from a stored project."""
    project = Project(
        id="proj-1", user_id="u1", name="Shop", description=None, prompt=None,
        framework="vue", language="javascript",
        project_metadata={"options": {"includeTests": True, "complexity": "complex"}},
    )
    request = request_for(project)
    assert request.language == "javascript"
    assert request.prompt == "Shop"
    assert request.framework == "react"
    assert request.options.include_tests is True
    assert request.options.complexity == "complex"
    assert request.project_id == "proj-1"


def test_request_for_project_without_metadata():
    """Test that a project stored with null metadata still yields default options."""
    project = Project(id="proj-2", user_id="u1", name="Blog", framework="react", language="typescript", project_metadata=None)
    request = request_for(project)
    assert request.options.include_tests is False
    assert request.options.complexity == "medium"
    assert request.language == "typescript"
