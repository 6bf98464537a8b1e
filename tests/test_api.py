from fastapi.testclient import TestClient

from linkgraph.links.manager import LinkGraphManager
from tests.fakes import FakeItemStore


def create_link(
    client: TestClient, source_id: str, target_id: str, relationship_type: str = "dependency"
):
    """Helper function to create a link in feature F."""
    return client.post(
        "/api/features/F/links",
        json={
            "source_id": source_id,
            "target_id": target_id,
            "relationship_type": relationship_type,
        },
    )


def test_health(test_client: TestClient) -> None:
    response = test_client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_create_link_endpoint(test_client: TestClient, fake_item_store: FakeItemStore) -> None:
    """Test that creating a link returns the source item's links and saves the store."""
    response = create_link(test_client, "I1", "I2")

    assert response.status_code == 201, response.text
    body = response.json()
    assert [link["target_id"] for link in body["outgoing"]] == ["I2"]
    assert body["incoming"] == []
    assert fake_item_store.save_count == 1, "Store should be saved after the change"


def test_create_duplicate_link_conflicts(
    test_client: TestClient, fake_item_store: FakeItemStore
) -> None:
    """Test that creating an existing link is reported as a conflict."""
    create_link(test_client, "I1", "I2")
    response = create_link(test_client, "I1", "I2", "complements")

    assert response.status_code == 409
    assert response.json()["detail"] == "Link already exists"
    assert fake_item_store.save_count == 1


def test_create_circular_link_conflicts(test_client: TestClient) -> None:
    """Test that a circular dependency is refused with the existing path."""
    create_link(test_client, "I1", "I2")
    create_link(test_client, "I2", "I3")

    response = create_link(test_client, "I3", "I1")

    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["path"] == ["I1", "I2", "I3"]
    assert "circular dependency" in detail["message"]


def test_create_invalid_link_returns_errors(test_client: TestClient) -> None:
    """Test that validation errors are returned as a list of messages."""
    response = create_link(test_client, "I1", "I1", "blocks")

    assert response.status_code == 422
    assert response.json()["detail"] == [
        "Cannot link item to itself",
        "Valid relationship type is required (dependency or complements)",
    ]


def test_create_link_unknown_feature_or_item(test_client: TestClient) -> None:
    """Test that unknown features and items return 404."""
    response = test_client.post(
        "/api/features/MISSING/links",
        json={"source_id": "I1", "target_id": "I2", "relationship_type": "dependency"},
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "Feature not found"

    response = create_link(test_client, "I1", "NOPE")
    assert response.status_code == 404
    assert response.json()["detail"] == "Timeline item not found"


def test_validate_endpoint(test_client: TestClient) -> None:
    response = test_client.post("/api/links/validate", json={"source_id": "I1"})

    assert response.status_code == 200
    assert response.json() == {
        "valid": False,
        "errors": [
            "Target item ID is required",
            "Valid relationship type is required (dependency or complements)",
        ],
    }


def test_delete_link_endpoint(test_client: TestClient, fake_item_store: FakeItemStore) -> None:
    """Test that deleting a link removes it from stats and saves the store."""
    create_link(test_client, "I1", "I2")

    response = test_client.delete("/api/features/F/links/I1/I2")

    assert response.status_code == 200
    assert response.json() == {"deleted": True}
    assert test_client.get("/api/features/F/links/stats").json()["total"] == 0
    assert fake_item_store.save_count == 2

    response = test_client.delete("/api/features/F/links/I1/NOPE")
    assert response.status_code == 404


def test_stats_endpoint(test_client: TestClient) -> None:
    create_link(test_client, "I1", "I2")
    create_link(test_client, "I2", "I3")
    create_link(test_client, "I4", "I1", "complements")

    response = test_client.get("/api/features/F/links/stats")

    assert response.status_code == 200
    assert response.json() == {"total": 3, "by_type": {"dependency": 2, "complements": 1}}

    assert test_client.get("/api/features/NO_ITEMS/links/stats").status_code == 404


def test_check_endpoint(test_client: TestClient) -> None:
    """Test the combined existence and cycle check."""
    create_link(test_client, "I1", "I2")
    create_link(test_client, "I2", "I3")

    response = test_client.get(
        "/api/features/F/links/check", params={"source_id": "I3", "target_id": "I1"}
    )
    assert response.status_code == 200
    assert response.json() == {
        "exists": False,
        "would_create_circular": True,
        "path": ["I1", "I2", "I3"],
    }

    response = test_client.get(
        "/api/features/F/links/check", params={"source_id": "I1", "target_id": "I2"}
    )
    assert response.json() == {"exists": True, "would_create_circular": False, "path": []}


def test_item_link_endpoints(test_client: TestClient) -> None:
    """Test item links, dependencies and dependents."""
    create_link(test_client, "I1", "I2")
    create_link(test_client, "I2", "I3")
    create_link(test_client, "I2", "I4", "complements")

    links = test_client.get("/api/features/F/items/I2/links").json()
    assert [link["source_id"] for link in links["incoming"]] == ["I1"]
    assert [link["target_id"] for link in links["outgoing"]] == ["I3", "I4"]

    dependencies = test_client.get("/api/features/F/items/I2/dependencies").json()
    assert [item["id"] for item in dependencies] == ["I3"]

    dependents = test_client.get("/api/features/F/items/I2/dependents").json()
    assert [item["name"] for item in dependents] == ["Design"]

    assert test_client.get("/api/features/F/items/NOPE/links").status_code == 404


def test_audit_and_remove_item_links_endpoints(test_client: TestClient) -> None:
    create_link(test_client, "I1", "I2")
    create_link(test_client, "I3", "I2", "complements")

    assert test_client.get("/api/features/F/links/audit").json() == []

    response = test_client.delete("/api/features/F/items/I2/links")
    assert response.status_code == 200
    assert response.json() == {"removed": 4}
    assert test_client.get("/api/features/F/links/stats").json()["total"] == 0


def test_cycles_endpoint(test_client: TestClient, permissive_manager: LinkGraphManager) -> None:
    create_link(test_client, "I1", "I2")
    create_link(test_client, "I2", "I3")

    response = test_client.get("/api/features/F/links/cycles")
    assert response.status_code == 200
    assert response.json() == {"has_cycles": False, "cycles": [], "affected_items": []}

    # The strict API refuses cycles, so store one the way older data could hold it
    permissive_manager.create_link("F", "I3", "I2", "dependency")

    report = test_client.get("/api/features/F/links/cycles").json()
    assert report["has_cycles"] is True
    assert report["cycles"] == [["I2", "I3"]]
    assert report["affected_items"] == ["I2", "I3"]

    assert test_client.get("/api/features/MISSING/links/cycles").status_code == 404
