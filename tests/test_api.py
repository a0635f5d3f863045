import os
import sys

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from fastapi.testclient import TestClient # type: ignore

from main import app

client = TestClient(app)

CODE = """
package com.shop;

class Item {}

class Order extends Base {
    private Item mainItem;
}
"""


def test_health():
    assert client.get("/health").json() == {"status": "ok"}


def test_detect():
    response = client.post("/detect", json={"code": "", "filename": "Order.java"})
    assert response.status_code == 200
    assert response.json() == {"language": "java", "confidence": 0.95, "source": "extension"}


def test_parse_returns_debug_graph_and_diagnostics():
    response = client.post("/parse", json={"code": CODE, "filename": "Order.java"})
    assert response.status_code == 200
    data = response.json()

    assert data["language"] == "java"
    edges = {(e["src"], e["dst"], e["type"]) for e in data["diagram"]["edges"]}
    assert ("class:com.shop.Order", "class:com.shop.Item", "ASSOCIATES") in edges
    assert ("class:com.shop.Order", "stub:Base", "INHERITS") in edges
    assert [d["name"] for d in data["diagnostics"]] == ["Base"]
    assert data["parse_errors"] == []


def test_render_plantuml():
    response = client.post("/render", json={"code": CODE, "filename": "Order.java", "format": "plantuml"})
    assert response.status_code == 200
    output = response.json()["output"]
    assert output.startswith("@startuml")
    assert 'Order -- "mainItem" Item' in output


def test_render_java_files_with_language_override():
    response = client.post("/render", json={"code": CODE, "language": "java", "format": "java"})
    assert response.status_code == 200
    assert set(response.json()["output"]) == {"com/shop/Item.java", "com/shop/Order.java"}


def test_render_unknown_package():
    response = client.post("/render", json={"code": CODE, "filename": "Order.java", "package": "nope"})
    assert response.status_code == 404


def test_render_unsupported_format():
    response = client.post("/render", json={"code": CODE, "filename": "Order.java", "format": "svg"})
    assert response.status_code == 422


def test_syntax_error_is_bad_request():
    response = client.post("/parse", json={"code": "class {", "filename": "Broken.java"})
    assert response.status_code == 400


def test_unknown_language_is_bad_request():
    response = client.post("/parse", json={"code": "hello world"})
    assert response.status_code == 400
    assert "not yet implemented" in response.json()["detail"]["error"]


def test_duplicate_object_is_conflict():
    code = "class A {}\nclass A {}"
    response = client.post("/parse", json={"code": code, "filename": "A.java"})
    assert response.status_code == 409
    assert response.json()["detail"]["name"] == "A"


def test_malformed_annotation_strict_and_lenient():
    code = """
    /** @assoc -> Missing */
    class A {}
    """
    strict = client.post("/parse", json={"code": code, "filename": "A.java"})
    assert strict.status_code == 400

    lenient = client.post("/parse", json={"code": code, "filename": "A.java", "strict": False})
    assert lenient.status_code == 200
    assert [d["code"] for d in lenient.json()["diagnostics"]] == ["malformed-annotation"]


def test_render_kind_conflict_is_conflict(monkeypatch):
    import main
    from diagram.errors import ObjectKindConflictError

    def conflicting_tree(diagram):
        raise ObjectKindConflictError("a", "class", "package")

    monkeypatch.setattr(main, "build_package_tree", conflicting_tree)
    response = client.post("/render", json={"code": CODE, "filename": "Order.java"})
    assert response.status_code == 409
    assert response.json()["detail"]["name"] == "a"
