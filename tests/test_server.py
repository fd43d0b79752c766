from fastapi.testclient import TestClient

from flatbook import server as server_util

from conftest import build_epub, sample_members


def _client() -> TestClient:
    return TestClient(server_util.create_app())


def test_index_renders_container() -> None:
    response = _client().get("/")
    assert response.status_code == 200
    assert 'id="epub-content"' in response.text


def test_health() -> None:
    response = _client().get("/api/health")
    assert response.json() == {"status": "ok"}


def test_convert_epub_upload(sample_epub: bytes) -> None:
    response = _client().post(
        "/api/convert",
        files={"file": ("book.epub", sample_epub, "application/epub+zip")},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["type"] == "success"
    assert data["status"] == "ok"
    payload = data["payload"]
    assert payload["type"] == "epub"
    assert payload["html"].index("Chapter One") < payload["html"].index("Chapter Two")
    assert payload["css"].startswith("#epub-content")


def test_convert_upload_with_explicit_type() -> None:
    response = _client().post(
        "/api/convert",
        files={"file": ("upload.bin", b"# Heading\n", "application/octet-stream")},
        data={"type": "markdown"},
    )
    assert response.status_code == 200
    assert response.json()["payload"]["type"] == "markdown"


def test_fatal_error_is_a_single_message() -> None:
    members = sample_members()
    del members["META-INF/container.xml"]
    response = _client().post(
        "/api/convert",
        files={"file": ("book.epub", build_epub(members), "application/epub+zip")},
    )
    assert response.status_code == 400
    assert response.json()["detail"].startswith("Failed to parse file:")


def test_unsupported_upload_is_rejected() -> None:
    response = _client().post(
        "/api/convert",
        files={"file": ("scan.pdf", b"%PDF", "application/pdf")},
    )
    assert response.status_code == 400


def test_convert_text_payload() -> None:
    response = _client().post("/api/convert/text", json={"content": "Some **bold** text."})
    assert response.status_code == 200
    payload = response.json()["payload"]
    assert "<strong>bold</strong>" in payload["html"]
    assert payload["type"] == "markdown"


def test_convert_text_rejects_epub_type() -> None:
    response = _client().post("/api/convert/text", json={"content": "x", "type": "epub"})
    assert response.status_code == 400


def test_unknown_declared_type_is_rejected() -> None:
    response = _client().post(
        "/api/convert",
        files={"file": ("notes.md", b"# Heading\n", "text/markdown")},
        data={"type": "pdf"},
    )
    assert response.status_code == 400
    response = _client().post("/api/convert/text", json={"content": "x", "type": "pdf"})
    assert response.status_code == 400
