"""
Name: Document Lifecycle Rules Tests

Responsibilities:
  - Validate canonical and extended transition tables
  - Validate the status-change permission gate
  - Validate delete/archive rules and status timestamps
"""

from datetime import datetime, timedelta, timezone

import pytest
from app.domain.entities import DocumentStatus
from app.domain.lifecycle import (
    TransitionPolicy,
    can_archive_document,
    can_bulk_archive,
    can_delete_document,
    can_user_change_document_status,
    is_transition_allowed,
    status_timestamps,
)
from app.domain.workspaces import WorkspaceType
from app.identity.users import UserRole

from tests.conftest import make_principal

pytestmark = pytest.mark.unit

DRAFT = DocumentStatus.DRAFT
STORED = DocumentStatus.STORED
ARCHIVED = DocumentStatus.ARCHIVED


class TestTransitionTables:
    @pytest.mark.parametrize(
        "current, target, allowed",
        [
            (DRAFT, STORED, True),
            (STORED, ARCHIVED, True),
            (DRAFT, ARCHIVED, False),
            (STORED, DRAFT, False),
            (ARCHIVED, STORED, False),
            (ARCHIVED, DRAFT, False),
        ],
    )
    def test_canonical(self, current, target, allowed):
        assert is_transition_allowed(TransitionPolicy.CANONICAL, current, target) is allowed

    @pytest.mark.parametrize(
        "current, target, allowed",
        [
            (DRAFT, ARCHIVED, True),
            (STORED, DRAFT, True),
            (ARCHIVED, STORED, True),
            (ARCHIVED, DRAFT, False),
        ],
    )
    def test_extended(self, current, target, allowed):
        assert is_transition_allowed(TransitionPolicy.EXTENDED, current, target) is allowed


class TestStatusGate:
    def test_admin_always_allowed(self, admin, document_factory):
        document = document_factory.create(workspace=WorkspaceType.AMPP, status=ARCHIVED)

        assert can_user_change_document_status(admin, document, STORED).allowed is True

    def test_creator_pairs_allowed_regardless_of_role(self, cf_member, document_factory):
        document = document_factory.create(
            created_by=cf_member.id, workspace=WorkspaceType.CAM, status=DRAFT
        )

        assert can_user_change_document_status(cf_member, document, STORED).allowed is True

    def test_creator_fallthrough_to_role_rules(self, cf_member, document_factory):
        # draft -> draft no es un par de creador: cae a las reglas por rol.
        document = document_factory.create(
            created_by=cf_member.id, workspace=WorkspaceType.CAM, status=DRAFT
        )

        decision = can_user_change_document_status(cf_member, document, DRAFT)

        assert decision.allowed is False
        assert decision.reason == "CF members can only access comisiones_cf workspace"

    def test_secretary_own_workspace_allowed(self, secretario_cam, document_factory):
        document = document_factory.create(workspace=WorkspaceType.CAM, status=STORED)

        assert can_user_change_document_status(secretario_cam, document, ARCHIVED).allowed

    def test_secretary_other_workspace_denied(self, secretario_cam, document_factory):
        document = document_factory.create(workspace=WorkspaceType.AMPP, status=STORED)

        decision = can_user_change_document_status(secretario_cam, document, ARCHIVED)

        assert decision.allowed is False
        assert decision.reason == "Insufficient permissions to change document status"

    def test_executive_allowed_everywhere(self, presidente, document_factory):
        document = document_factory.create(workspace=WorkspaceType.AMPP, status=DRAFT)

        assert can_user_change_document_status(presidente, document, STORED).allowed

    def test_intendente_only_in_intendencia(self, intendente, document_factory):
        own = document_factory.create(workspace=WorkspaceType.INTENDENCIA)
        other = document_factory.create(workspace=WorkspaceType.CAM)

        assert can_user_change_document_status(intendente, own, STORED).allowed
        assert not can_user_change_document_status(intendente, other, STORED).allowed

    def test_missing_principal(self, document_factory):
        decision = can_user_change_document_status(None, document_factory.create(), STORED)

        assert decision.allowed is False
        assert decision.reason == "User not found"


class TestDeleteRules:
    def test_admin_can_delete_archived(self, admin, document_factory):
        document = document_factory.create(status=ARCHIVED)

        assert can_delete_document(admin, document).allowed

    def test_creator_can_delete_own_draft_only(self, cf_member, document_factory):
        draft = document_factory.create(created_by=cf_member.id, status=DRAFT)
        stored = document_factory.create(created_by=cf_member.id, status=STORED)

        assert can_delete_document(cf_member, draft).allowed
        decision = can_delete_document(cf_member, stored)
        assert decision.allowed is False
        assert "Created by: you" in decision.reason

    def test_secretary_same_workspace_not_archived(self, secretario_cam, document_factory):
        stored = document_factory.create(workspace=WorkspaceType.CAM, status=STORED)
        archived = document_factory.create(workspace=WorkspaceType.CAM, status=ARCHIVED)

        assert can_delete_document(secretario_cam, stored).allowed
        assert not can_delete_document(secretario_cam, archived).allowed

    def test_executive_not_archived(self, presidente, document_factory):
        stored = document_factory.create(workspace=WorkspaceType.AMPP, status=STORED)
        archived = document_factory.create(workspace=WorkspaceType.AMPP, status=ARCHIVED)

        assert can_delete_document(presidente, stored).allowed
        assert not can_delete_document(presidente, archived).allowed

    def test_denial_reason_describes_document(self, intendente, document_factory):
        document = document_factory.create(status=STORED)

        decision = can_delete_document(intendente, document)

        assert decision.reason == (
            "User with role intendente cannot delete this document. "
            "Document status: stored, Created by: another user"
        )


class TestArchiveRules:
    def test_requires_stored(self, admin, document_factory):
        decision = can_archive_document(admin, document_factory.create(status=DRAFT))

        assert decision.allowed is False
        assert decision.reason == "Invalid status: draft. Must be 'stored' to archive"

    def test_creator_can_archive(self, cf_member, document_factory):
        document = document_factory.create(created_by=cf_member.id, status=STORED)

        assert can_archive_document(cf_member, document).allowed

    def test_non_creator_intendente_cannot_archive(self, intendente, document_factory):
        document = document_factory.create(status=STORED)

        assert not can_archive_document(intendente, document).allowed

    def test_bulk_archive_roles(self, admin, secretario_ampp, presidente, cf_member):
        assert can_bulk_archive(admin)
        assert can_bulk_archive(secretario_ampp)
        assert not can_bulk_archive(presidente)
        assert not can_bulk_archive(cf_member)
        assert not can_bulk_archive(None)


class TestStatusTimestamps:
    NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def test_stored_sets_stored_at_and_clears_archived(self):
        stamps = status_timestamps(STORED, self.NOW, current_stored_at=None)

        assert stamps.stored_at == self.NOW
        assert stamps.archived_at is None

    def test_archived_keeps_existing_stored_at(self):
        earlier = self.NOW - timedelta(days=3)

        stamps = status_timestamps(ARCHIVED, self.NOW, current_stored_at=earlier)

        assert stamps.stored_at == earlier
        assert stamps.archived_at == self.NOW

    def test_archived_from_draft_fills_stored_at(self):
        stamps = status_timestamps(ARCHIVED, self.NOW)

        assert stamps.stored_at == self.NOW

    def test_draft_clears_both(self):
        stamps = status_timestamps(DRAFT, self.NOW, current_stored_at=self.NOW)

        assert stamps.stored_at is None
        assert stamps.archived_at is None


def test_cf_member_cannot_change_presidencia_documents(document_factory):
    principal = make_principal(UserRole.CF_MEMBER, WorkspaceType.COMISIONES_CF)
    document = document_factory.create(workspace=WorkspaceType.PRESIDENCIA, status=STORED)

    assert not can_user_change_document_status(principal, document, ARCHIVED).allowed
