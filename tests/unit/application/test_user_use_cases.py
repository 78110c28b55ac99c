"""
Name: User Administration Use Case Tests

Responsibilities:
  - Validate user creation (authorization, validation, uniqueness)
  - Validate listing and updates (role/workspace revalidation)
  - Validate user deletion (self/admin guards, active documents, purge)
  - Validate capability, matrix and workspace-access queries
"""

from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from app.application.usecases.users.create_user import CreateUserUseCase
from app.application.usecases.users.delete_user import DeleteUserUseCase
from app.application.usecases.users.manage_users import (
    ListUsersUseCase,
    UpdateUserUseCase,
)
from app.application.usecases.users.user_access import (
    GetPermissionsMatrixUseCase,
    GetUserCapabilitiesUseCase,
    ResolveWorkspaceAccessUseCase,
)
from app.application.usecases.users.user_results import UserErrorCode
from app.domain.entities import DocumentStatus
from app.domain.workspace_policy import Principal
from app.domain.workspaces import WorkspaceType
from app.identity.users import UserRole
from app.infrastructure.storage import StorageNotFoundError, StorageUnavailableError

pytestmark = pytest.mark.unit


def _hasher(password: str) -> str:
    return f"hashed:{password}"


@pytest.fixture
def create_use_case(user_repo):
    return CreateUserUseCase(user_repo, password_hasher=_hasher)


def _create_kwargs(**overrides):
    values = dict(
        email="  Secretaria.CAM@Example.com ",
        password="supersecret",
        full_name="María Pérez",
        role="secretario_cam",
        workspace="cam",
    )
    values.update(overrides)
    return values


class TestCreateUser:
    def test_admin_creates_user(self, create_use_case, user_repo, admin):
        result = create_use_case.execute(principal=admin, **_create_kwargs())

        assert result.error is None
        assert result.user.email == "secretaria.cam@example.com"
        assert result.user.role == UserRole.SECRETARIO_CAM
        assert result.user.password_hash == "hashed:supersecret"
        assert user_repo.get_user_by_email("secretaria.cam@example.com") is not None

    def test_non_admin_is_forbidden(self, create_use_case, presidente):
        result = create_use_case.execute(principal=presidente, **_create_kwargs())

        assert result.error.code == UserErrorCode.FORBIDDEN

    def test_duplicate_email_is_conflict(self, create_use_case, admin):
        create_use_case.execute(principal=admin, **_create_kwargs())

        result = create_use_case.execute(
            principal=admin, **_create_kwargs(email="secretaria.cam@example.com")
        )

        assert result.error.code == UserErrorCode.CONFLICT
        assert result.error.message == "A user with this email already exists"

    @pytest.mark.parametrize(
        "overrides, fragment",
        [
            ({"email": "no-at-sign"}, "Invalid email"),
            ({"password": "short"}, "at least 8"),
            ({"full_name": "   "}, "Full name"),
            ({"workspace": "ampp"}, 'must be assigned to "cam"'),
            ({"role": "emperor"}, "Unknown role"),
        ],
    )
    def test_validation(self, create_use_case, admin, overrides, fragment):
        result = create_use_case.execute(principal=admin, **_create_kwargs(**overrides))

        assert result.error.code == UserErrorCode.VALIDATION_ERROR
        assert fragment in result.error.message


class TestListAndUpdate:
    def test_list_requires_users_read(self, user_repo, user_factory, presidente, secretario_cam):
        user_repo.add(user_factory.create())
        use_case = ListUsersUseCase(user_repo)

        assert len(use_case.execute(principal=presidente).users) == 1
        assert use_case.execute(principal=secretario_cam).error.code == UserErrorCode.FORBIDDEN

    def test_list_filters_by_role(self, user_repo, user_factory, admin):
        user_repo.add(user_factory.create(role=UserRole.SECRETARIO_CAM))
        user_repo.add(
            user_factory.create(role=UserRole.CF_MEMBER, workspace=WorkspaceType.COMISIONES_CF)
        )

        result = ListUsersUseCase(user_repo).execute(principal=admin, role=UserRole.CF_MEMBER)

        assert [user.role for user in result.users] == [UserRole.CF_MEMBER]

    def test_update_revalidates_resulting_combination(self, user_repo, user_factory, admin):
        user = user_repo.add(user_factory.create())
        use_case = UpdateUserUseCase(user_repo, password_hasher=_hasher)

        bad = use_case.execute(principal=admin, user_id=user.id, role="secretario_ampp")
        good = use_case.execute(
            principal=admin, user_id=user.id, role="secretario_ampp", workspace="ampp"
        )

        assert bad.error.code == UserErrorCode.VALIDATION_ERROR
        assert good.error is None
        assert good.user.workspace == WorkspaceType.AMPP

    def test_update_password_is_hashed(self, user_repo, user_factory, admin):
        user = user_repo.add(user_factory.create())

        result = UpdateUserUseCase(user_repo, password_hasher=_hasher).execute(
            principal=admin, user_id=user.id, password="otra-clave-segura"
        )

        assert result.user.password_hash == "hashed:otra-clave-segura"

    def test_admin_cannot_deactivate_self(self, user_repo, user_factory):
        me = user_repo.add(
            user_factory.create(role=UserRole.ADMINISTRADOR, workspace=WorkspaceType.PRESIDENCIA)
        )

        result = UpdateUserUseCase(user_repo).execute(
            principal=Principal.from_user(me), user_id=me.id, is_active=False
        )

        assert result.error.code == UserErrorCode.VALIDATION_ERROR

    def test_update_requires_admin(self, user_repo, user_factory, presidente):
        user = user_repo.add(user_factory.create())

        result = UpdateUserUseCase(user_repo).execute(
            principal=presidente, user_id=user.id, full_name="Otro"
        )

        assert result.error.code == UserErrorCode.FORBIDDEN


class TestDeleteUser:
    @pytest.fixture
    def delete_use_case(self, user_repo, document_repo, storage):
        return DeleteUserUseCase(user_repo, document_repo, storage)

    def test_admin_deletes_user_without_documents(self, delete_use_case, user_repo, user_factory, admin):
        user = user_repo.add(user_factory.create())

        result = delete_use_case.execute(principal=admin, user_id=user.id)

        assert result.error is None
        assert result.deleted is True
        assert user_repo.get_user_by_id(user.id) is None

    def test_requires_admin(self, delete_use_case, user_repo, user_factory, presidente):
        user = user_repo.add(user_factory.create())

        result = delete_use_case.execute(principal=presidente, user_id=user.id)

        assert result.error.code == UserErrorCode.FORBIDDEN
        assert user_repo.get_user_by_id(user.id) is not None

    def test_missing_user_is_not_found(self, delete_use_case, admin):
        result = delete_use_case.execute(principal=admin, user_id=uuid4())

        assert result.error.code == UserErrorCode.NOT_FOUND

    def test_cannot_delete_self(self, delete_use_case, user_repo, user_factory):
        me = user_repo.add(
            user_factory.create(role=UserRole.ADMINISTRADOR, workspace=WorkspaceType.PRESIDENCIA)
        )

        result = delete_use_case.execute(principal=Principal.from_user(me), user_id=me.id)

        assert result.error.code == UserErrorCode.VALIDATION_ERROR
        assert user_repo.get_user_by_id(me.id) is not None

    def test_cannot_delete_another_admin(self, delete_use_case, user_repo, user_factory, admin):
        other = user_repo.add(
            user_factory.create(role=UserRole.ADMINISTRADOR, workspace=WorkspaceType.PRESIDENCIA)
        )

        result = delete_use_case.execute(principal=admin, user_id=other.id)

        assert result.error.code == UserErrorCode.FORBIDDEN

    def test_active_documents_block_deletion(
        self, delete_use_case, user_repo, document_repo, user_factory, document_factory, admin
    ):
        user = user_repo.add(user_factory.create())
        for status in (DocumentStatus.DRAFT, DocumentStatus.STORED, DocumentStatus.ARCHIVED):
            document_repo.save_document(document_factory.create(created_by=user.id, status=status))

        result = delete_use_case.execute(principal=admin, user_id=user.id)

        assert result.error.code == UserErrorCode.CONFLICT
        assert "2 active documents" in result.error.message
        assert user_repo.get_user_by_id(user.id) is not None

    def test_archived_documents_are_purged(
        self, delete_use_case, user_repo, document_repo, storage, user_factory, document_factory, admin
    ):
        user = user_repo.add(user_factory.create())
        archived = document_factory.create(created_by=user.id, status=DocumentStatus.ARCHIVED)
        document_repo.save_document(archived)
        storage.upload_file(archived.storage_key, b"acta", "application/pdf")

        result = delete_use_case.execute(principal=admin, user_id=user.id)

        assert result.deleted is True
        assert result.purged_documents == 1
        assert document_repo.get_document(archived.id) is None
        with pytest.raises(StorageNotFoundError):
            storage.download_file(archived.storage_key)
        assert user_repo.get_user_by_id(user.id) is None

    def test_storage_failure_keeps_user(
        self, user_repo, document_repo, user_factory, document_factory, admin
    ):
        storage = MagicMock()
        storage.delete_file.side_effect = StorageUnavailableError()
        user = user_repo.add(user_factory.create())
        archived = document_factory.create(created_by=user.id, status=DocumentStatus.ARCHIVED)
        document_repo.save_document(archived)

        result = DeleteUserUseCase(user_repo, document_repo, storage).execute(
            principal=admin, user_id=user.id
        )

        assert result.error.code == UserErrorCode.SERVICE_UNAVAILABLE
        assert document_repo.get_document(archived.id) is not None
        assert user_repo.get_user_by_id(user.id) is not None


class TestAccessQueries:
    def test_own_capabilities(self, user_repo, user_factory):
        me = user_repo.add(
            user_factory.create(role=UserRole.CF_MEMBER, workspace=WorkspaceType.COMISIONES_CF)
        )

        result = GetUserCapabilitiesUseCase(user_repo).execute(
            principal=Principal.from_user(me)
        )

        assert result.tokens == ["read", "create", "download"]

    def test_other_user_capabilities_require_admin(self, user_repo, user_factory, secretario_cam):
        other = user_repo.add(user_factory.create())

        result = GetUserCapabilitiesUseCase(user_repo).execute(
            principal=secretario_cam, user_id=other.id
        )

        assert result.error.code == UserErrorCode.FORBIDDEN

    def test_permissions_matrix_admin_only(self, admin, presidente):
        use_case = GetPermissionsMatrixUseCase()

        assert "permissions" in use_case.execute(principal=admin).matrix
        assert use_case.execute(principal=presidente).error.code == UserErrorCode.FORBIDDEN

    def test_inactive_user_has_no_workspace_access(self, user_repo, user_factory, admin):
        inactive = user_repo.add(user_factory.create(is_active=False))

        result = ResolveWorkspaceAccessUseCase(user_repo).execute(
            principal=admin, user_id=inactive.id, workspace=WorkspaceType.CAM
        )

        assert result.access.has_access is False
        assert result.access.reason == "User not found"
