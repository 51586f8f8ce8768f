"""
collabhub/test_categories.py

Category and entry endpoints follow the same guard as projects, keyed through
the category's project.

Run:
    pytest collabhub/test_categories.py -v
"""

import pytest
from bson import ObjectId

from collabhub.db import CATEGORIES, ENTRIES
from collabhub.permissions import PermissionName


@pytest.fixture
def project(owner, make_project):
    return make_project(owner, "Survey Site")


@pytest.fixture
def trees(mongo_db, project):
    return mongo_db[CATEGORIES].find_one({"projectId": project, "name": "Trees"})


def post_entry(client, category_id, user, data):
    return client.post(f"/categories/{category_id}/entry", json={"data": data}, headers=user.headers)


class TestReadCategories:

    def test_category_with_entries(self, client, owner, trees):
        post_entry(client, trees["_id"], owner, {"species": "Teak", "height": 12})
        response = client.get(f"/categories/{trees['_id']}", headers=owner.headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Trees"
        assert data["mainAttribute"] == "species"
        assert data["attributes"] == ["species", "height"]
        assert [e["data"]["species"] for e in data["entries"]] == ["Teak"]

    def test_main_attribute_values(self, client, owner, trees):
        post_entry(client, trees["_id"], owner, {"species": "Teak"})
        post_entry(client, trees["_id"], owner, {"species": "Rosewood", "height": 3})
        response = client.get(f"/categories/{trees['_id']}/entry", headers=owner.headers)
        assert response.status_code == 200
        assert sorted(v["value"] for v in response.json()["data"]) == ["Rosewood", "Teak"]

    def test_all_entries_of_project(self, client, owner, project, trees):
        post_entry(client, trees["_id"], owner, {"species": "Teak"})
        response = client.get(f"/categories/{project}/allEntry", headers=owner.headers)
        assert response.status_code == 200
        by_name = {c["name"]: c for c in response.json()["data"]}
        assert set(by_name) == {"Trees", "Birds"}
        assert len(by_name["Trees"]["entries"]) == 1
        assert by_name["Birds"]["entries"] == []

    def test_non_member_denied(self, client, make_user, trees, project):
        stranger = make_user("Stranger")
        assert client.get(f"/categories/{trees['_id']}", headers=stranger.headers).status_code == 403
        assert client.get(f"/categories/{project}/allEntry", headers=stranger.headers).status_code == 403

    def test_unknown_category(self, client, owner):
        assert client.get(f"/categories/{ObjectId()}", headers=owner.headers).status_code == 404


class TestEntries:

    def test_reader_cannot_create_entry(self, client, mongo_db, make_user, add_member, project, trees):
        reader = make_user("Reader")
        add_member(reader, project, PermissionName.READ_ONLY)
        response = post_entry(client, trees["_id"], reader, {"species": "Teak"})
        assert response.status_code == 403
        assert mongo_db[ENTRIES].count_documents({}) == 0

    def test_editor_creates_entry(self, client, mongo_db, make_user, add_member, project, trees):
        editor = make_user("Editor")
        add_member(editor, project, PermissionName.CAN_EDITED)
        response = post_entry(client, trees["_id"], editor, {"species": "Teak"})
        assert response.status_code == 201
        entry = mongo_db[ENTRIES].find_one({"categoryId": trees["_id"]})
        assert entry["createdBy"] == editor.oid
        assert entry["projectId"] == project

    def test_unknown_attribute_rejected(self, client, owner, trees):
        response = post_entry(client, trees["_id"], owner, {"species": "Teak", "colour": "green"})
        assert response.status_code == 400
        assert "colour" in response.json()["detail"]

    def test_main_attribute_required(self, client, owner, trees):
        assert post_entry(client, trees["_id"], owner, {"height": 4}).status_code == 400


class TestEditAndDeleteCategory:

    def test_editor_renames_and_changes_attributes(self, client, mongo_db, make_user, add_member, project, trees):
        editor = make_user("Editor")
        add_member(editor, project, PermissionName.CAN_EDITED)
        response = client.put(
            f"/categories/{trees['_id']}",
            json={"name": "Large Trees", "attributes": ["species", "height", "girth"]},
            headers=editor.headers,
        )
        assert response.status_code == 204
        category = mongo_db[CATEGORIES].find_one({"_id": trees["_id"]})
        assert category["name"] == "Large Trees"
        assert category["attributes"] == ["species", "height", "girth"]
        assert category["editedBy"] == editor.oid

    def test_main_attribute_must_stay_an_attribute(self, client, owner, trees):
        response = client.put(f"/categories/{trees['_id']}", json={"attributes": ["height"]}, headers=owner.headers)
        assert response.status_code == 400

    def test_editor_cannot_delete(self, client, make_user, add_member, project, trees):
        editor = make_user("Editor")
        add_member(editor, project, PermissionName.CAN_EDITED)
        assert client.delete(f"/categories/{trees['_id']}", headers=editor.headers).status_code == 403

    def test_owner_soft_deletes(self, client, mongo_db, owner, project, trees):
        assert client.delete(f"/categories/{trees['_id']}", headers=owner.headers).status_code == 204
        assert mongo_db[CATEGORIES].find_one({"_id": trees["_id"]})["isDeleted"] is True
        assert client.get(f"/categories/{trees['_id']}", headers=owner.headers).status_code == 404
        names = [c["name"] for c in client.get(f"/categories/{project}/allEntry", headers=owner.headers).json()["data"]]
        assert names == ["Birds"]


class TestDeletedProject:
    """Categories and entries of a deleted project are frozen and hidden."""

    def test_no_category_access_after_delete(self, client, mongo_db, owner, project, trees):
        client.patch(f"/projects/{project}/deleted", json={"isDeleted": True}, headers=owner.headers)

        entry = post_entry(client, trees["_id"], owner, {"species": "Teak"})
        edit = client.put(f"/categories/{trees['_id']}", json={"name": "Renamed"}, headers=owner.headers)
        remove = client.delete(f"/categories/{trees['_id']}", headers=owner.headers)
        read = client.get(f"/categories/{trees['_id']}", headers=owner.headers)
        values = client.get(f"/categories/{trees['_id']}/entry", headers=owner.headers)
        all_entries = client.get(f"/categories/{project}/allEntry", headers=owner.headers)

        assert entry.status_code == 404
        assert edit.status_code == 404
        assert remove.status_code == 404
        assert read.status_code == 404
        assert values.status_code == 404
        assert all_entries.status_code == 404

        assert mongo_db[ENTRIES].count_documents({}) == 0
        category = mongo_db[CATEGORIES].find_one({"_id": trees["_id"]})
        assert category["name"] == "Trees"
        assert category["isDeleted"] is False
