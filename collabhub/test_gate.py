"""
collabhub/test_gate.py

Membership resolution and the mutation gate, including the window between
authorization and the write.

Run:
    pytest collabhub/test_gate.py -v
"""

from unittest.mock import MagicMock

import pytest
from bson import ObjectId

from collabhub.db import COLLABORATORS, PROJECTS
from collabhub.errors import NotFoundError, PermissionDeniedError, ValidationError
from collabhub.gate import authorize_project, guarded_write
from collabhub.membership import resolve_membership
from collabhub.permissions import PermissionName, catalog
from collabhub.rbac import Operation


class TestResolveMembership:

    @pytest.mark.parametrize("bad_id", ["", "123", "not-an-object-id", "zzzzzzzzzzzzzzzzzzzzzzzz", None, 42])
    def test_malformed_ids_fail_before_store_access(self, bad_id):
        db = MagicMock()
        with pytest.raises(ValidationError):
            resolve_membership(db, str(ObjectId()), bad_id)
        with pytest.raises(ValidationError):
            resolve_membership(db, bad_id, str(ObjectId()))
        db.__getitem__.assert_not_called()

    def test_absent_membership_is_none(self, mongo_db, owner):
        assert resolve_membership(mongo_db, owner.id, str(ObjectId())) is None

    def test_finds_owner_membership_after_create(self, mongo_db, owner, make_project):
        project_id = make_project(owner)
        membership = resolve_membership(mongo_db, owner.id, str(project_id))
        assert membership is not None
        assert membership["permissionId"] == catalog.id_for(PermissionName.OWNER)


class TestGuardedWrite:

    def test_revocation_between_check_and_write_denies(self, mongo_db, owner, make_user, make_project, add_member):
        editor = make_user("Editor")
        project_id = make_project(owner)
        add_member(editor, project_id, PermissionName.CAN_EDITED)

        membership = authorize_project(mongo_db, editor.id, project_id, Operation.PROJECT_EDIT)

        # Owner revokes the editor after authorization, before the write
        mongo_db[COLLABORATORS].delete_one({"_id": membership["_id"]})

        with pytest.raises(PermissionDeniedError):
            with guarded_write(mongo_db, membership) as session:
                mongo_db[PROJECTS].update_one({"_id": project_id}, {"$set": {"name": "Stale"}}, session=session)

        assert mongo_db[PROJECTS].find_one({"_id": project_id})["name"] == "Project"

    def test_downgrade_between_check_and_write_denies(self, mongo_db, owner, make_user, make_project, add_member):
        editor = make_user("Editor")
        project_id = make_project(owner)
        add_member(editor, project_id, PermissionName.CAN_EDITED)

        membership = authorize_project(mongo_db, editor.id, project_id, Operation.PROJECT_ARCHIVE)
        mongo_db[COLLABORATORS].update_one(
            {"_id": membership["_id"]},
            {"$set": {"permissionId": catalog.id_for(PermissionName.READ_ONLY)}},
        )

        with pytest.raises(PermissionDeniedError):
            with guarded_write(mongo_db, membership):
                pass

    def test_unchanged_membership_yields_session(self, mongo_db, owner, make_project):
        project_id = make_project(owner)
        membership = authorize_project(mongo_db, owner.id, project_id, Operation.PROJECT_DELETE)
        with guarded_write(mongo_db, membership) as session:
            assert session is None  # transactions disabled in tests


class TestProjectLiveness:

    def test_deleted_project_fails_authorization(self, mongo_db, owner, make_project):
        project_id = make_project(owner)
        mongo_db[PROJECTS].update_one({"_id": project_id}, {"$set": {"isDeleted": True}})
        with pytest.raises(NotFoundError):
            authorize_project(mongo_db, owner.id, project_id, Operation.PROJECT_VIEW)

    def test_delete_between_check_and_write_denies(self, mongo_db, owner, make_project):
        project_id = make_project(owner)
        membership = authorize_project(mongo_db, owner.id, project_id, Operation.CATEGORY_EDIT)

        mongo_db[PROJECTS].update_one({"_id": project_id}, {"$set": {"isDeleted": True}})

        with pytest.raises(NotFoundError):
            with guarded_write(mongo_db, membership):
                pass

    def test_non_member_of_deleted_project_is_denied_not_missing(self, mongo_db, owner, make_user, make_project):
        stranger = make_user("Stranger")
        project_id = make_project(owner)
        mongo_db[PROJECTS].update_one({"_id": project_id}, {"$set": {"isDeleted": True}})
        with pytest.raises(PermissionDeniedError):
            authorize_project(mongo_db, stranger.id, project_id, Operation.PROJECT_VIEW)
