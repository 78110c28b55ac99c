"""
Use Cases Layer (Business Operations)

This package exposes entry points for business logic, organized by feature/domain.

Structure
---------
usecases/
├── documents/      # Upload, read, list, download, lifecycle, delete, stats
├── users/          # User management, capabilities, workspace access
├── workspace/      # Workspace catalog, stats and scoped listings
└── admin/          # Activity log and admin dashboard

Usage
-----
Import from subpackages for clarity:

    from app.application.usecases.documents import UploadDocumentUseCase
    from app.application.usecases.users import CreateUserUseCase

Or use the barrel exports from this module:

    from app.application.usecases import UploadDocumentUseCase, CreateUserUseCase
"""

# Admin / activity
from .admin import GetAdminDashboardUseCase, ListActivitiesUseCase

# Documents
from .documents import (
    ArchiveDocumentUseCase,
    BulkArchiveDocumentsUseCase,
    BulkDeleteDocumentsUseCase,
    ChangeDocumentStatusUseCase,
    DeleteDocumentUseCase,
    DocumentError,
    DocumentErrorCode,
    DocumentLifecycleEngine,
    DownloadDocumentUseCase,
    FetchDocumentContentUseCase,
    GetDocumentStatsUseCase,
    GetDocumentUseCase,
    ListDocumentsUseCase,
    UpdateDocumentMetadataUseCase,
    UploadDocumentInput,
    UploadDocumentUseCase,
)

# Users
from .users import (
    CreateUserUseCase,
    DeleteUserUseCase,
    GetPermissionsMatrixUseCase,
    GetUserCapabilitiesUseCase,
    ListUsersUseCase,
    ResolveWorkspaceAccessUseCase,
    UpdateUserUseCase,
    UserError,
    UserErrorCode,
)

# Workspaces
from .workspace import (
    GetWorkspaceStatsUseCase,
    ListWorkspaceDocumentsUseCase,
    ListWorkspacesUseCase,
)

__all__ = [
    # Documents
    "UploadDocumentUseCase",
    "UploadDocumentInput",
    "GetDocumentUseCase",
    "ListDocumentsUseCase",
    "DownloadDocumentUseCase",
    "FetchDocumentContentUseCase",
    "UpdateDocumentMetadataUseCase",
    "DocumentLifecycleEngine",
    "ChangeDocumentStatusUseCase",
    "ArchiveDocumentUseCase",
    "BulkArchiveDocumentsUseCase",
    "DeleteDocumentUseCase",
    "BulkDeleteDocumentsUseCase",
    "GetDocumentStatsUseCase",
    "DocumentError",
    "DocumentErrorCode",
    # Users
    "CreateUserUseCase",
    "DeleteUserUseCase",
    "ListUsersUseCase",
    "UpdateUserUseCase",
    "GetUserCapabilitiesUseCase",
    "GetPermissionsMatrixUseCase",
    "ResolveWorkspaceAccessUseCase",
    "UserError",
    "UserErrorCode",
    # Workspaces
    "ListWorkspacesUseCase",
    "GetWorkspaceStatsUseCase",
    "ListWorkspaceDocumentsUseCase",
    # Admin
    "ListActivitiesUseCase",
    "GetAdminDashboardUseCase",
]
