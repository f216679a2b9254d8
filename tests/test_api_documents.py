import uuid
from unittest.mock import patch

import pytest

from app.models.document import Document, DocumentStatus, PermissionRequest


def _upload(name="file2.pdf", data=b"%PDF-1.4 replacement"):
    return {"file": (name, data, "application/pdf")}


class TestAuthRequired:
    def test_missing_token(self, client) -> None:
        resp = client.get("/documents")
        assert resp.status_code == 401
        assert resp.json()["code"] == "http_401"

    def test_bad_token(self, client) -> None:
        resp = client.get("/documents", headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401


class TestUploadAndRead:
    def test_create(self, client, auth_headers, person) -> None:
        resp = client.post(
            "/documents",
            data={"title": "SOP-002", "description": "Line clearance", "document_type": "sop"},
            files=_upload("sop.pdf"),
            headers=auth_headers,
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["title"] == "SOP-002"
        assert body["version"] == 1
        assert body["status"] == "active"
        assert body["created_by"] == str(person.id)
        assert body["file_url"].startswith("/uploads/")
        assert body["file_url"].endswith(".pdf")

    def test_create_without_file(self, client, auth_headers) -> None:
        resp = client.post("/documents", data={"title": "No file"}, headers=auth_headers)
        assert resp.status_code == 400

    def test_create_requires_title(self, client, auth_headers) -> None:
        resp = client.post("/documents", files=_upload(), headers=auth_headers)
        assert resp.status_code == 422
        assert resp.json()["code"] == "validation_error"
        assert all("url" not in err for err in resp.json()["details"])

    @patch("app.services.storage.settings")
    def test_create_too_large(self, mock_settings, client, auth_headers) -> None:
        mock_settings.max_upload_bytes = 3
        mock_settings.s3_endpoint_url = None
        resp = client.post(
            "/documents",
            data={"title": "Huge"},
            files=_upload(data=b"12345"),
            headers=auth_headers,
        )
        assert resp.status_code == 413

    def test_list(self, client, auth_headers, document) -> None:
        resp = client.get("/documents?q=quality", headers=auth_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["count"] == 1
        assert data["limit"] == 10
        assert data["items"][0]["id"] == str(document.id)
        assert data["items"][0]["creator"]["email"].startswith("owner-")

    def test_list_invalid_order(self, client, auth_headers) -> None:
        resp = client.get("/documents?order_by=file_url", headers=auth_headers)
        assert resp.status_code == 400

    def test_get(self, client, auth_headers, document) -> None:
        resp = client.get(f"/documents/{document.id}", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["file_url"] == "/uploads/file1.pdf"

    def test_get_not_found(self, client, auth_headers) -> None:
        resp = client.get(f"/documents/{uuid.uuid4()}", headers=auth_headers)
        assert resp.status_code == 404
        assert resp.json()["message"] == "Document not found"

    def test_versioned_prefix(self, client, auth_headers, document) -> None:
        resp = client.get(f"/api/v1/documents/{document.id}", headers=auth_headers)
        assert resp.status_code == 200


class TestDeleteEndpoint:
    def test_owner_requests_delete(self, client, auth_headers, document, db_session) -> None:
        resp = client.delete(f"/documents/{document.id}", headers=auth_headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["ok"] is True
        assert body["message"] == "Delete requested; waiting for admin approval"
        assert body["request"]["type"] == "delete"
        assert body["request"]["status"] == "pending"

        db_session.refresh(document)
        assert document.status == DocumentStatus.pending_delete

    def test_other_user_forbidden(self, client, other_headers, document) -> None:
        resp = client.delete(f"/documents/{document.id}", headers=other_headers)
        assert resp.status_code == 403
        assert resp.json()["message"] == "Only owner can request delete"

    def test_duplicate_pending(self, client, auth_headers, document) -> None:
        client.delete(f"/documents/{document.id}", headers=auth_headers)
        resp = client.delete(f"/documents/{document.id}", headers=auth_headers)
        assert resp.status_code == 409

    def test_admin_deletes(self, client, admin_headers, document, db_session) -> None:
        doc_id = document.id
        resp = client.delete(f"/documents/{doc_id}", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["message"] == "Deleted by admin"
        assert resp.json()["request"] is None
        db_session.expire_all()
        assert db_session.get(Document, doc_id) is None


class TestReplaceEndpoint:
    def test_owner_requests_replace(self, client, auth_headers, document, db_session) -> None:
        resp = client.post(
            f"/documents/{document.id}/replace",
            files=_upload(),
            headers=auth_headers,
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "Replace requested; waiting for admin approval"
        assert body["request"]["type"] == "replace"
        assert body["request"]["replace_file_url"].startswith("/uploads/")

        db_session.refresh(document)
        assert document.status == DocumentStatus.pending_replace
        assert document.file_url == "/uploads/file1.pdf"

    def test_replace_without_file(self, client, auth_headers, document) -> None:
        resp = client.post(f"/documents/{document.id}/replace", headers=auth_headers)
        assert resp.status_code == 400

    def test_other_user_forbidden_before_upload(
        self, client, other_headers, document
    ) -> None:
        with patch("app.api.documents.storage") as mock_storage:
            resp = client.post(
                f"/documents/{document.id}/replace",
                files=_upload(),
                headers=other_headers,
            )
        assert resp.status_code == 403
        mock_storage.save.assert_not_called()

    def test_admin_replaces_with_overrides(
        self, client, admin_headers, document
    ) -> None:
        resp = client.post(
            f"/documents/{document.id}/replace",
            data={"title": "Quality Manual rev B", "description": " "},
            files=_upload(),
            headers=admin_headers,
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "Replaced by admin"
        assert body["document"]["version"] == 2
        assert body["document"]["title"] == "Quality Manual rev B"
        # Blank overrides keep the current value.
        assert body["document"]["description"] == "Top-level QMS manual"
        assert body["document"]["status"] == "active"


class TestEndToEnd:
    @pytest.mark.parametrize("prefix", ["", "/api/v1"])
    def test_replace_approve_notify(
        self, client, auth_headers, admin_headers, document, db_session, prefix
    ) -> None:
        staged = client.post(
            f"{prefix}/documents/{document.id}/replace",
            files=_upload(),
            headers=auth_headers,
        ).json()["request"]

        pending = client.get(f"{prefix}/approvals/requests", headers=admin_headers).json()
        assert [r["id"] for r in pending["items"]] == [staged["id"]]

        resp = client.post(
            f"{prefix}/approvals/requests/{staged['id']}/approve",
            headers=admin_headers,
        )
        assert resp.json() == {
            "ok": True,
            "message": "Replace approved & document updated",
        }

        doc = client.get(f"{prefix}/documents/{document.id}", headers=auth_headers).json()
        assert doc["version"] == 2
        assert doc["file_url"] == staged["replace_file_url"]
        assert doc["status"] == "active"

        count = client.get(f"{prefix}/notifications/unread-count", headers=auth_headers)
        assert count.json() == {"count": 1}

        request = db_session.get(PermissionRequest, uuid.UUID(staged["id"]))
        db_session.refresh(request)
        assert request.replace_file_url is None
