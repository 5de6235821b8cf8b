import csv
import io

API = "/api/v1"


class TestFolderProjections:
    def _setup(self, client, headers, folder_id):
        type_id = client.post(f"{API}/document-types", json={
            "folder_id": folder_id, "code": "SALARY_SLIP", "name": "Salary Slip",
            "allow_single": False, "allow_multiple": True,
        }, headers=headers).json()["id"]
        for employee_id in ("emp-1", "emp-1", "emp-2"):
            r = client.post(f"{API}/employees/{employee_id}/documents", json={
                "document_type_id": type_id, "file_name": "slip.pdf", "file_path": "/files/slip.pdf",
            }, headers=headers)
            assert r.status_code == 201
        return type_id

    def test_create_folder(self, client, headers):
        r = client.post(f"{API}/folders", json={"folder_name": "Payroll", "display_order": 3}, headers=headers)
        assert r.status_code == 201
        data = r.json()
        assert data["folder_name"] == "Payroll"
        assert data["is_system_folder"] is False
        assert data["document_count"] == 0

    def test_folder_counts(self, client, headers, folder_id):
        self._setup(client, headers, folder_id)
        client.post(f"{API}/folders", json={"folder_name": "Empty"}, headers=headers)

        counts = {f["folder_name"]: f["document_count"] for f in
                  client.get(f"{API}/folders", headers=headers).json()}
        assert counts == {"Employee Documents": 3, "Empty": 0}

        r = client.get(f"{API}/folders", params={"employee_id": "emp-1", "search": "employee"}, headers=headers)
        assert [(f["folder_name"], f["document_count"]) for f in r.json()] == [("Employee Documents", 2)]

    def test_document_types_in_folder(self, client, headers, folder_id):
        self._setup(client, headers, folder_id)
        r = client.get(f"{API}/folders/{folder_id}/document-types", headers=headers)
        assert r.status_code == 200
        assert [(t["code"], t["file_count"]) for t in r.json()] == [("SALARY_SLIP", 3)]

        r = client.get(f"{API}/folders/{folder_id}/document-types", params={"employee_id": "emp-2"},
                       headers=headers)
        assert r.json()[0]["file_count"] == 1

    def test_documents_in_folder(self, client, headers, folder_id):
        type_id = self._setup(client, headers, folder_id)
        r = client.get(f"{API}/folders/{folder_id}/documents", headers=headers)
        assert len(r.json()) == 3

        r = client.get(f"{API}/folders/{folder_id}/documents",
                       params={"employee_id": "emp-2", "document_type_id": type_id}, headers=headers)
        assert [d["employee_id"] for d in r.json()] == ["emp-2"]

        r = client.get(f"{API}/folders/{folder_id}/documents", params={"to_date": "2000-01-01"}, headers=headers)
        assert r.json() == []

    def test_unknown_folder(self, client, headers, folder_id):
        r = client.get(f"{API}/folders/missing/documents", headers=headers)
        assert r.status_code == 404
        assert r.json()["code"] == "FolderNotFound"
        assert client.get(f"{API}/folders/missing/document-types", headers=headers).status_code == 404

    def test_csv_export(self, client, headers, folder_id):
        self._setup(client, headers, folder_id)
        r = client.get(f"{API}/documents/export.csv", params={"employee_id": "emp-1"}, headers=headers)
        assert r.status_code == 200
        assert r.headers["content-type"].startswith("text/csv")

        rows = list(csv.DictReader(io.StringIO(r.text)))
        assert len(rows) == 2
        assert {row["document_type_code"] for row in rows} == {"SALARY_SLIP"}
        assert {row["employee_id"] for row in rows} == {"emp-1"}


class TestSeed:
    def test_seed_default_structure(self, client, headers):
        r = client.post(f"{API}/seed", headers=headers)
        assert r.status_code == 200
        assert r.json() == {"folders_created": 5, "document_types_created": 20, "skipped": False}

        folders = client.get(f"{API}/folders", headers=headers).json()
        assert folders[0]["folder_name"] == "Employee Documents"
        assert len(client.get(f"{API}/document-types", headers=headers).json()) == 20

    def test_seed_is_idempotent(self, client, headers):
        client.post(f"{API}/seed", headers=headers)
        r = client.post(f"{API}/seed", headers=headers)
        assert r.json()["skipped"] is True
        assert len(client.get(f"{API}/folders", headers=headers).json()) == 5

    def test_seeded_types_are_protected(self, client, headers):
        client.post(f"{API}/seed", headers=headers)
        types = client.get(f"{API}/document-types", params={"search": "PAN_CARD"}, headers=headers).json()
        pan = types[0]
        assert pan["is_system_type"] is True
        assert pan["is_mandatory"] is True
        assert pan["cardinality"] == "single"

        r = client.delete(f"{API}/document-types/{pan['id']}", headers=headers)
        assert r.status_code == 403

    def test_seed_per_company(self, client, headers):
        client.post(f"{API}/seed", headers=headers)
        other = {"X-Company-Id": "company-2", "X-User-Id": "hr-2"}
        assert client.post(f"{API}/seed", headers=other).json()["skipped"] is False
