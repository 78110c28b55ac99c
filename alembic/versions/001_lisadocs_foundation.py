"""
============================================================
TARJETA CRC (Class / Responsibilities / Collaborators)
============================================================
Class: 001_lisadocs_foundation (Alembic Migration)

Responsibilities:
  - Crear el esquema completo desde cero (migración fundacional).
  - Definir users, documents y document_activities con sus constraints.
  - Reflejar en DB los invariantes del ciclo de vida (status + timestamps).

Collaborators:
  - PostgreSQL 16+
  - Alembic (framework de migraciones)
  - Repositorios Postgres (usan este esquema como contrato)

Policy:
  - Esta es una migración BASELINE. Downgrade NO soportado.
  - Toda evolución futura del esquema debe hacerse con migraciones aditivas (002+).
  - Convención de nombres (constraints / indexes):
      pk_<tabla>                         - Primary keys
      uq_<tabla>_<col>                   - Unique constraints
      ix_<tabla>_<col>                   - Indexes
      ck_<tabla>_<regla>                 - Check constraints
      fk_<tabla>_<col>__<ref_tabla>      - Foreign keys
============================================================
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_lisadocs_foundation"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_WORKSPACES = "('cam','ampp','presidencia','intendencia','comisiones_cf')"
_ROLES = (
    "('administrador','presidente','vicepresidente','secretario_cam',"
    "'secretario_ampp','secretario_cf','intendente','cf_member')"
)
_STATUSES = "('draft','stored','archived')"
_ACTIONS = (
    "('created','uploaded','downloaded','viewed','updated',"
    "'status_changed','archived','deleted')"
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """
    Crea el esquema fundacional completo.

    Orden:
      1) Identity (users)
      2) Documents
      3) Activity log
    """

    # =========================================================
    # 1) IDENTITY (users)
    # =========================================================
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("password_hash", sa.Text, nullable=False),
        sa.Column("role", sa.String(50), nullable=False),
        sa.Column("workspace", sa.String(50), nullable=False),
        sa.Column(
            "is_active", sa.Boolean, nullable=False, server_default=sa.text("true")
        ),
        *_timestamps(),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.CheckConstraint(f"role IN {_ROLES}", name="ck_users_role"),
        sa.CheckConstraint(f"workspace IN {_WORKSPACES}", name="ck_users_workspace"),
    )
    op.create_index("ix_users_role", "users", ["role"])
    op.create_index("ix_users_workspace", "users", ["workspace"])

    # =========================================================
    # 2) DOCUMENTS
    # =========================================================
    op.create_table(
        "documents",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("workspace", sa.String(50), nullable=False),
        sa.Column(
            "status", sa.String(20), nullable=False, server_default="draft"
        ),
        sa.Column(
            "tags",
            postgresql.ARRAY(sa.Text),
            nullable=False,
            server_default=sa.text("'{}'::text[]"),
        ),
        sa.Column(
            "facets",
            postgresql.JSONB,
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column(
            "metadata",
            postgresql.JSONB,
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("file_size", sa.BigInteger, nullable=False),
        sa.Column("mime_type", sa.String(255), nullable=False),
        sa.Column("file_hash", sa.String(64), nullable=False),
        sa.Column("storage_key", sa.Text, nullable=False),
        *_timestamps(),
        sa.Column("stored_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_documents"),
        sa.ForeignKeyConstraint(
            ["created_by"],
            ["users.id"],
            name="fk_documents_created_by__users",
            ondelete="RESTRICT",
        ),
        sa.UniqueConstraint("storage_key", name="uq_documents_storage_key"),
        sa.CheckConstraint(f"status IN {_STATUSES}", name="ck_documents_status"),
        sa.CheckConstraint(
            f"workspace IN {_WORKSPACES}", name="ck_documents_workspace"
        ),
        sa.CheckConstraint("file_size >= 0", name="ck_documents_file_size"),
        # Timestamps coherentes con el estado (espejo del dominio).
        sa.CheckConstraint(
            "(status = 'draft' AND stored_at IS NULL AND archived_at IS NULL)"
            " OR (status = 'stored' AND stored_at IS NOT NULL AND archived_at IS NULL)"
            " OR (status = 'archived' AND stored_at IS NOT NULL"
            " AND archived_at IS NOT NULL)",
            name="ck_documents_status_timestamps",
        ),
    )

    # Índices según queries reales (listados filtrados + stats).
    op.create_index("ix_documents_workspace", "documents", ["workspace"])
    op.create_index("ix_documents_status", "documents", ["status"])
    op.create_index("ix_documents_created_by", "documents", ["created_by"])
    op.create_index("ix_documents_created_at", "documents", ["created_at"])
    op.create_index(
        "ix_documents_workspace_status_created_at",
        "documents",
        ["workspace", "status", "created_at"],
    )
    op.create_index("ix_documents_file_hash", "documents", ["file_hash"])
    op.create_index(
        "ix_documents_tags", "documents", ["tags"], postgresql_using="gin"
    )
    op.create_index(
        "ix_documents_facets", "documents", ["facets"], postgresql_using="gin"
    )

    # =========================================================
    # 3) ACTIVITY LOG
    # =========================================================
    op.create_table(
        "document_activities",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        # Nullable: la actividad sobrevive al borrado físico del documento.
        sa.Column("document_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("workspace", sa.String(50), nullable=True),
        sa.Column(
            "details",
            postgresql.JSONB,
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("user_agent", sa.Text, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_document_activities"),
        sa.ForeignKeyConstraint(
            ["document_id"],
            ["documents.id"],
            name="fk_document_activities_document_id__documents",
            ondelete="SET NULL",
        ),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name="fk_document_activities_user_id__users",
            ondelete="SET NULL",
        ),
        sa.CheckConstraint(
            f"action IN {_ACTIONS}", name="ck_document_activities_action"
        ),
    )
    op.create_index(
        "ix_document_activities_document_id", "document_activities", ["document_id"]
    )
    op.create_index(
        "ix_document_activities_user_id", "document_activities", ["user_id"]
    )
    op.create_index(
        "ix_document_activities_workspace_created_at",
        "document_activities",
        ["workspace", "created_at"],
    )
    op.create_index(
        "ix_document_activities_created_at", "document_activities", ["created_at"]
    )


def downgrade() -> None:
    raise RuntimeError("Downgrade not supported for baseline migration")
