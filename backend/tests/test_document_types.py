from hrdocs.models.employee_document import EmployeeDocumentFieldValue

API = "/api/v1"


class TestDocumentTypes:
    def _create_type(self, client, headers, folder_id, **overrides):
        payload = {"folder_id": folder_id, "code": "PAN_CARD", "name": "PAN Card", **overrides}
        return client.post(f"{API}/document-types", json=payload, headers=headers)

    def test_create_type_with_fields(self, client, headers, folder_id):
        r = self._create_type(client, headers, folder_id, is_mandatory=True, fields=[
            {"field_name": "pan_number", "field_label": "PAN Number", "field_type": "text", "is_required": True},
            {"field_name": "name_on_card", "field_label": "Name on Card", "field_type": "text"},
        ])
        assert r.status_code == 201
        data = r.json()
        assert data["code"] == "PAN_CARD"
        assert data["cardinality"] == "single"
        assert data["allowed_file_types"] == "pdf,jpg,jpeg,png,doc,docx"
        assert data["max_file_size_mb"] == 5.0
        assert [f["field_name"] for f in data["fields"]] == ["pan_number", "name_on_card"]
        assert data["fields"][0]["is_required"] is True

    def test_requires_request_context(self, client, folder_id):
        r = client.get(f"{API}/document-types")
        assert r.status_code == 401

    def test_duplicate_code_per_company(self, client, headers, folder_id):
        assert self._create_type(client, headers, folder_id).status_code == 201
        r = self._create_type(client, headers, folder_id, name="Another PAN")
        assert r.status_code == 409
        assert r.json()["code"] == "DuplicateTypeCode"
        assert r.json()["kind"] == "Conflict"

        other = {"X-Company-Id": "company-2", "X-User-Id": "hr-2"}
        other_folder = client.post(f"{API}/folders", json={"folder_name": "Docs"}, headers=other).json()["id"]
        assert self._create_type(client, other, other_folder).status_code == 201

    def test_unknown_folder(self, client, headers, folder_id):
        r = self._create_type(client, headers, "no-such-folder")
        assert r.status_code == 404
        assert r.json()["code"] == "FolderNotFound"

    def test_folder_of_other_company_rejected(self, client, headers, folder_id):
        other = {"X-Company-Id": "company-2", "X-User-Id": "hr-2"}
        r = self._create_type(client, other, folder_id)
        assert r.status_code == 404

    def test_bad_field_creates_nothing(self, client, headers, folder_id):
        r = self._create_type(client, headers, folder_id, fields=[
            {"field_name": "ok", "field_label": "OK", "field_type": "text"},
            {"field_name": "kind", "field_label": "Kind", "field_type": "single_select"},
        ])
        assert r.status_code == 422
        assert r.json()["code"] == "InvalidFieldDefinition"

        r = client.get(f"{API}/document-types", headers=headers)
        assert r.json() == []
        # the code is still free
        assert self._create_type(client, headers, folder_id).status_code == 201

    def test_duplicate_field_names_in_batch(self, client, headers, folder_id):
        r = self._create_type(client, headers, folder_id, fields=[
            {"field_name": "number", "field_label": "Number", "field_type": "text"},
            {"field_name": "number", "field_label": "Number again", "field_type": "text"},
        ])
        assert r.status_code == 409
        assert r.json()["code"] == "DuplicateFieldName"
        assert client.get(f"{API}/document-types", headers=headers).json() == []

    def test_get_and_list(self, client, headers, folder_id):
        type_id = self._create_type(client, headers, folder_id).json()["id"]
        self._create_type(client, headers, folder_id, code="PASSPORT", name="Passport")

        r = client.get(f"{API}/document-types/{type_id}", headers=headers)
        assert r.status_code == 200
        assert r.json()["document_count"] == 0

        r = client.get(f"{API}/document-types?search=pass", headers=headers)
        assert [t["code"] for t in r.json()] == ["PASSPORT"]

        r = client.get(f"{API}/document-types/missing", headers=headers)
        assert r.status_code == 404
        assert r.json()["code"] == "TypeNotFound"

    def test_other_company_cannot_read(self, client, headers, folder_id):
        type_id = self._create_type(client, headers, folder_id).json()["id"]
        other = {"X-Company-Id": "company-2", "X-User-Id": "hr-2"}
        assert client.get(f"{API}/document-types/{type_id}", headers=other).status_code == 404

    def test_update_type(self, client, headers, folder_id):
        type_id = self._create_type(client, headers, folder_id).json()["id"]
        r = client.put(f"{API}/document-types/{type_id}", json={
            "name": "Permanent Account Number", "allow_multiple": True, "code": "PAN",
        }, headers=headers)
        assert r.status_code == 200
        data = r.json()
        assert data["name"] == "Permanent Account Number"
        assert data["code"] == "PAN"
        assert data["cardinality"] == "single_or_multiple"

    def test_update_to_taken_code(self, client, headers, folder_id):
        self._create_type(client, headers, folder_id)
        type_id = self._create_type(client, headers, folder_id, code="PASSPORT", name="Passport").json()["id"]
        r = client.put(f"{API}/document-types/{type_id}", json={"code": "PAN_CARD"}, headers=headers)
        assert r.status_code == 409
        assert r.json()["code"] == "DuplicateTypeCode"

    def test_system_type_protected(self, client, headers, folder_id):
        type_id = self._create_type(client, headers, folder_id, is_system_type=True).json()["id"]

        r = client.put(f"{API}/document-types/{type_id}", json={"code": "PAN"}, headers=headers)
        assert r.status_code == 403
        assert r.json()["code"] == "ProtectedType"

        r = client.delete(f"{API}/document-types/{type_id}", headers=headers)
        assert r.status_code == 403

        # other attributes stay editable
        r = client.put(f"{API}/document-types/{type_id}", json={"name": "PAN"}, headers=headers)
        assert r.status_code == 200

    def test_delete_type(self, client, headers, folder_id):
        type_id = self._create_type(client, headers, folder_id).json()["id"]
        r = client.delete(f"{API}/document-types/{type_id}", headers=headers)
        assert r.status_code == 200
        assert client.get(f"{API}/document-types/{type_id}", headers=headers).status_code == 404

    def test_delete_type_in_use(self, client, headers, folder_id):
        type_id = self._create_type(client, headers, folder_id).json()["id"]
        r = client.post(f"{API}/employees/emp-1/documents", json={
            "document_type_id": type_id, "file_name": "pan.pdf", "file_path": "/files/pan.pdf",
        }, headers=headers)
        assert r.status_code == 201
        doc_id = r.json()["id"]
        client.put(f"{API}/documents/{doc_id}", json={"is_active": False}, headers=headers)

        r = client.delete(f"{API}/document-types/{type_id}", headers=headers)
        assert r.status_code == 409
        assert r.json()["code"] == "TypeInUse"


class TestFields:
    def _type_id(self, client, headers, folder_id):
        r = client.post(f"{API}/document-types", json={
            "folder_id": folder_id, "code": "BANK_DETAILS", "name": "Bank Details",
            "fields": [{"field_name": "account_number", "field_label": "Account Number", "field_type": "text"}],
        }, headers=headers)
        return r.json()["id"], r.json()["fields"][0]["id"]

    def test_add_field(self, client, headers, folder_id):
        type_id, _ = self._type_id(client, headers, folder_id)
        r = client.post(f"{API}/document-types/{type_id}/fields", json={
            "field_name": "account_type", "field_label": "Account Type",
            "field_type": "single_select", "field_values": ["Savings", "Current"],
        }, headers=headers)
        assert r.status_code == 201
        assert r.json()["field_values"] == ["Savings", "Current"]

        fields = client.get(f"{API}/document-types/{type_id}", headers=headers).json()["fields"]
        assert {f["field_name"] for f in fields} == {"account_number", "account_type"}

    def test_add_duplicate_field(self, client, headers, folder_id):
        type_id, _ = self._type_id(client, headers, folder_id)
        r = client.post(f"{API}/document-types/{type_id}/fields", json={
            "field_name": "account_number", "field_label": "Again", "field_type": "text",
        }, headers=headers)
        assert r.status_code == 409
        assert r.json()["code"] == "DuplicateFieldName"

    def test_update_field(self, client, headers, folder_id):
        type_id, field_id = self._type_id(client, headers, folder_id)
        r = client.put(f"{API}/document-types/{type_id}/fields/{field_id}", json={
            "field_label": "A/C Number", "is_required": True,
        }, headers=headers)
        assert r.status_code == 200
        assert r.json()["field_label"] == "A/C Number"
        assert r.json()["field_name"] == "account_number"
        assert r.json()["is_required"] is True

    def test_update_field_invalid_definition(self, client, headers, folder_id):
        type_id, field_id = self._type_id(client, headers, folder_id)
        r = client.put(f"{API}/document-types/{type_id}/fields/{field_id}", json={
            "field_type": "radio",
        }, headers=headers)
        assert r.status_code == 422
        assert r.json()["code"] == "InvalidFieldDefinition"

    def test_field_not_found(self, client, headers, folder_id):
        type_id, _ = self._type_id(client, headers, folder_id)
        r = client.put(f"{API}/document-types/{type_id}/fields/nope", json={"field_label": "x"}, headers=headers)
        assert r.status_code == 404
        assert r.json()["code"] == "FieldNotFound"

    def test_delete_field_hides_stored_values(self, client, headers, folder_id):
        type_id, field_id = self._type_id(client, headers, folder_id)
        r = client.post(f"{API}/employees/emp-1/documents", json={
            "document_type_id": type_id, "file_name": "bank.pdf", "file_path": "/files/bank.pdf",
            "field_values": [{"field_id": field_id, "field_value": "001122"}],
        }, headers=headers)
        doc_id = r.json()["id"]
        assert r.json()["field_values"][0]["field_value"] == "001122"

        r = client.delete(f"{API}/document-types/{type_id}/fields/{field_id}", headers=headers)
        assert r.status_code == 200

        r = client.get(f"{API}/documents/{doc_id}", headers=headers)
        assert r.json()["field_values"] == []

    def test_delete_field_with_values(self, client, headers, folder_id, db):
        type_id, field_id = self._type_id(client, headers, folder_id)
        client.post(f"{API}/employees/emp-1/documents", json={
            "document_type_id": type_id, "file_name": "bank.pdf", "file_path": "/files/bank.pdf",
            "field_values": [{"field_id": field_id, "field_value": "001122"}],
        }, headers=headers)

        r = client.delete(f"{API}/document-types/{type_id}/fields/{field_id}",
                          params={"cascade_values": True}, headers=headers)
        assert r.status_code == 200
        assert db.query(EmployeeDocumentFieldValue).filter(
            EmployeeDocumentFieldValue.field_id == field_id
        ).count() == 0
