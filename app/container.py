"""
===============================================================================
TARJETA CRC — app/container.py (Composition Root / DI manual)
===============================================================================

Responsabilidades:
  - Componer dependencias (repositorios, storage, sink de actividad) siguiendo DIP.
  - Exponer factories para FastAPI (Depends) y para el worker.
  - Mantener singletons con caching (lru_cache) para recursos pesados.
  - Centralizar decisiones runtime basadas en Settings (config).

Colaboradores:
  - app.crosscutting.config.get_settings
  - app.domain.repositories.* (puertos)
  - app.domain.services.* (puertos)
  - app.infrastructure.* (implementaciones)
  - app.application.usecases.* (casos de uso)

Patrones aplicados:
  - Composition Root
  - Dependency Inversion (use cases dependen de puertos)
  - Lazy singletons con lru_cache; casos de uso sin estado, uno por request

Notas:
  - Este archivo NO contiene lógica de negocio.
  - Este archivo NO debe depender de FastAPI (solo expone factories).
===============================================================================
"""

from __future__ import annotations

from functools import lru_cache

from .activity import RepositoryActivityRecorder
from .application.usecases import (
    ArchiveDocumentUseCase,
    BulkArchiveDocumentsUseCase,
    BulkDeleteDocumentsUseCase,
    ChangeDocumentStatusUseCase,
    CreateUserUseCase,
    DeleteUserUseCase,
    DeleteDocumentUseCase,
    DocumentLifecycleEngine,
    DownloadDocumentUseCase,
    FetchDocumentContentUseCase,
    GetAdminDashboardUseCase,
    GetDocumentStatsUseCase,
    GetDocumentUseCase,
    GetPermissionsMatrixUseCase,
    GetUserCapabilitiesUseCase,
    GetWorkspaceStatsUseCase,
    ListActivitiesUseCase,
    ListDocumentsUseCase,
    ListUsersUseCase,
    ListWorkspaceDocumentsUseCase,
    ListWorkspacesUseCase,
    ResolveWorkspaceAccessUseCase,
    UpdateDocumentMetadataUseCase,
    UpdateUserUseCase,
    UploadDocumentUseCase,
)
from .crosscutting.config import get_settings
from .crosscutting.logger import logger
from .domain.lifecycle import TransitionPolicy
from .domain.repositories import (
    ActivityRepository,
    DocumentRepository,
    UserRepository,
)
from .domain.services import ActivityRecorder, FileStoragePort
from .identity.auth_users import hash_password
from .infrastructure.queue import RQActivityRecorder, RQQueueConfig
from .infrastructure.repositories import (
    InMemoryActivityRepository,
    InMemoryDocumentRepository,
    InMemoryUserRepository,
    PostgresActivityRepository,
    PostgresDocumentRepository,
    PostgresUserRepository,
)
from .infrastructure.services import create_retry_decorator
from .infrastructure.storage import (
    InMemoryFileStorage,
    S3Config,
    S3FileStorageAdapter,
)

# =============================================================================
# Helpers internos
# =============================================================================


def _is_test_env() -> bool:
    """
    Determina si estamos en entorno de test.

    Regla:
      - app_env ∈ {"test", "testing", "ci"} => se favorecen in-memory adapters.
    """
    env = get_settings().app_env.strip().lower()
    return env in {"test", "testing", "ci"}


# =============================================================================
# Repositorios (singletons)
# =============================================================================


@lru_cache(maxsize=1)
def get_document_repository() -> DocumentRepository:
    """Repositorio de documentos (in-memory en test; Postgres en runtime)."""
    if _is_test_env():
        return InMemoryDocumentRepository()
    return PostgresDocumentRepository()


@lru_cache(maxsize=1)
def get_user_repository() -> UserRepository:
    """Repositorio de usuarios (in-memory en test; Postgres en runtime)."""
    if _is_test_env():
        return InMemoryUserRepository()
    return PostgresUserRepository()


@lru_cache(maxsize=1)
def get_activity_repository() -> ActivityRepository:
    """Log de actividad (in-memory en test; Postgres en runtime)."""
    if _is_test_env():
        return InMemoryActivityRepository()
    return PostgresActivityRepository()


# =============================================================================
# Adapters de infraestructura (singletons)
# =============================================================================


@lru_cache(maxsize=1)
def get_file_storage() -> FileStoragePort | None:
    """
    Adapter de almacenamiento (S3/MinIO) si está configurado.

    Regla:
      - Sin bucket/credenciales: in-memory en test; None en runtime
        (los casos de uso responden 503).
    """
    settings = get_settings()

    if not settings.storage_configured():
        if _is_test_env():
            return InMemoryFileStorage()
        logger.warning("File storage no configurado: uploads/descargas deshabilitados")
        return None

    config = S3Config(
        bucket=settings.s3_bucket,
        access_key=settings.s3_access_key,
        secret_key=settings.s3_secret_key,
        region=settings.s3_region or None,
        endpoint_url=settings.s3_endpoint_url or None,
    )
    return S3FileStorageAdapter(
        config,
        retry_decorator=create_retry_decorator(
            max_attempts=settings.retry_max_attempts,
            base_delay=settings.retry_base_delay_seconds,
            max_delay=settings.retry_max_delay_seconds,
        ),
    )


@lru_cache(maxsize=1)
def get_activity_recorder() -> ActivityRecorder:
    """
    Sink de actividad.

    Regla:
      - REDIS_URL configurado => RQ (el worker persiste; fallas supervisadas).
      - Sin Redis => escritura directa al repositorio.
    """
    settings = get_settings()
    redis_url = settings.redis_url.strip()
    if not redis_url:
        return RepositoryActivityRecorder(get_activity_repository())

    from .worker.worker import build_redis_connection

    config = RQQueueConfig(
        queue_name=settings.activity_queue_name,
        retry_max_attempts=settings.activity_job_retries,
        job_timeout_seconds=settings.activity_job_timeout_seconds,
    )
    return RQActivityRecorder(redis=build_redis_connection(redis_url), config=config)


@lru_cache(maxsize=1)
def get_transition_policy() -> TransitionPolicy:
    return TransitionPolicy(get_settings().document_transition_policy)


# =============================================================================
# Casos de uso: documentos (factory por request)
# =============================================================================


def get_lifecycle_engine() -> DocumentLifecycleEngine:
    """Motor de ciclo de vida con la política de transiciones del deployment."""
    return DocumentLifecycleEngine(
        get_document_repository(),
        activity_recorder=get_activity_recorder(),
        policy=get_transition_policy(),
    )


def get_upload_document_use_case() -> UploadDocumentUseCase:
    """Caso de uso: subir documento (storage + metadata + actividad)."""
    return UploadDocumentUseCase(
        get_document_repository(),
        get_file_storage(),
        activity_recorder=get_activity_recorder(),
        max_upload_bytes=get_settings().max_upload_bytes,
    )


def get_get_document_use_case() -> GetDocumentUseCase:
    return GetDocumentUseCase(
        get_document_repository(), activity_recorder=get_activity_recorder()
    )


def get_list_documents_use_case() -> ListDocumentsUseCase:
    """Caso de uso: listar documentos (visibilidad estricta)."""
    return ListDocumentsUseCase(get_document_repository())


def get_document_stats_use_case() -> GetDocumentStatsUseCase:
    return GetDocumentStatsUseCase(get_document_repository())


def get_download_document_use_case() -> DownloadDocumentUseCase:
    """Caso de uso: URL presignada de descarga."""
    settings = get_settings()
    return DownloadDocumentUseCase(
        get_document_repository(),
        get_file_storage(),
        activity_recorder=get_activity_recorder(),
        default_ttl_seconds=settings.download_url_ttl_seconds,
        max_ttl_seconds=settings.download_url_max_ttl_seconds,
    )


def get_fetch_document_content_use_case() -> FetchDocumentContentUseCase:
    return FetchDocumentContentUseCase(
        get_document_repository(),
        get_file_storage(),
        activity_recorder=get_activity_recorder(),
    )


def get_update_document_metadata_use_case() -> UpdateDocumentMetadataUseCase:
    return UpdateDocumentMetadataUseCase(
        get_document_repository(), activity_recorder=get_activity_recorder()
    )


def get_change_document_status_use_case() -> ChangeDocumentStatusUseCase:
    """Caso de uso: cambio de estado (gate -> tabla -> escritura condicional)."""
    return ChangeDocumentStatusUseCase(
        get_document_repository(), get_lifecycle_engine()
    )


def get_archive_document_use_case() -> ArchiveDocumentUseCase:
    return ArchiveDocumentUseCase(get_document_repository(), get_lifecycle_engine())


def get_bulk_archive_documents_use_case() -> BulkArchiveDocumentsUseCase:
    return BulkArchiveDocumentsUseCase(get_archive_document_use_case())


def get_delete_document_use_case() -> DeleteDocumentUseCase:
    """Caso de uso: borrado físico (archivo primero, luego fila)."""
    return DeleteDocumentUseCase(
        get_document_repository(),
        get_file_storage(),
        activity_recorder=get_activity_recorder(),
    )


def get_bulk_delete_documents_use_case() -> BulkDeleteDocumentsUseCase:
    return BulkDeleteDocumentsUseCase(get_delete_document_use_case())


# =============================================================================
# Casos de uso: workspaces
# =============================================================================


def get_list_workspaces_use_case() -> ListWorkspacesUseCase:
    return ListWorkspacesUseCase()


def get_workspace_stats_use_case() -> GetWorkspaceStatsUseCase:
    return GetWorkspaceStatsUseCase(
        get_document_repository(),
        get_user_repository(),
        get_activity_repository(),
    )


def get_list_workspace_documents_use_case() -> ListWorkspaceDocumentsUseCase:
    return ListWorkspaceDocumentsUseCase(get_list_documents_use_case())


# =============================================================================
# Casos de uso: usuarios
# =============================================================================


def get_create_user_use_case() -> CreateUserUseCase:
    return CreateUserUseCase(get_user_repository(), password_hasher=hash_password)


def get_delete_user_use_case() -> DeleteUserUseCase:
    return DeleteUserUseCase(
        get_user_repository(), get_document_repository(), get_file_storage()
    )


def get_list_users_use_case() -> ListUsersUseCase:
    return ListUsersUseCase(get_user_repository())


def get_update_user_use_case() -> UpdateUserUseCase:
    return UpdateUserUseCase(get_user_repository(), password_hasher=hash_password)


def get_user_capabilities_use_case() -> GetUserCapabilitiesUseCase:
    return GetUserCapabilitiesUseCase(get_user_repository())


def get_permissions_matrix_use_case() -> GetPermissionsMatrixUseCase:
    return GetPermissionsMatrixUseCase()


def get_resolve_workspace_access_use_case() -> ResolveWorkspaceAccessUseCase:
    return ResolveWorkspaceAccessUseCase(get_user_repository())


# =============================================================================
# Casos de uso: actividad / admin
# =============================================================================


def get_list_activities_use_case() -> ListActivitiesUseCase:
    return ListActivitiesUseCase(get_activity_repository())


def get_admin_dashboard_use_case() -> GetAdminDashboardUseCase:
    return GetAdminDashboardUseCase(
        get_document_repository(),
        get_user_repository(),
        get_activity_repository(),
    )
