"""001 – Initial schema: all tables, indexes, enums, seed data.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-01-05 10:00:00.000000+05:30
"""

from alembic import op

# Revision identifiers
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

ENUM_TYPES: list[tuple[str, list[str]]] = [
    ("employment_type", ["full_time", "part_time", "contract"]),
    ("gender_type", ["male", "female", "other"]),
    ("user_role", ["employee", "manager", "hr", "admin"]),
    ("leave_status", ["pending", "approved", "rejected", "cancelled"]),
    ("holiday_type", ["national", "regional", "company"]),
    ("notification_type", ["leave_status", "pending_approval", "general"]),
    ("banner_color", ["red", "yellow"]),
]


def _create_enum(name: str, values: list[str]) -> None:
    vals = ", ".join(f"'{v}'" for v in values)
    op.execute(f"CREATE TYPE {name} AS ENUM ({vals})")


def _drop_enum(name: str) -> None:
    op.execute(f"DROP TYPE IF EXISTS {name}")


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    # ── Extensions ────────────────────────────────────────────────────────
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ── Enum types ────────────────────────────────────────────────────────
    for name, values in ENUM_TYPES:
        _create_enum(name, values)

    # ── 1. departments ────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE departments (
            id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            name        VARCHAR(150) NOT NULL UNIQUE,
            description TEXT,
            created_at  TIMESTAMPTZ DEFAULT NOW(),
            updated_at  TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # ── 2. employees ──────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE employees (
            id                   UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_code        VARCHAR(20)  NOT NULL UNIQUE,
            first_name           VARCHAR(100) NOT NULL,
            last_name            VARCHAR(100) NOT NULL,
            email                VARCHAR(255) NOT NULL UNIQUE,
            phone                VARCHAR(20),
            gender               gender_type,
            department_id        UUID REFERENCES departments(id),
            reporting_manager_id UUID REFERENCES employees(id),
            designation          VARCHAR(150),
            work_location        VARCHAR(150),
            state                VARCHAR(100),
            employment_type      employment_type DEFAULT 'full_time',
            date_of_joining      DATE NOT NULL,
            is_active            BOOLEAN DEFAULT TRUE,
            created_at           TIMESTAMPTZ DEFAULT NOW(),
            updated_at           TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX idx_employees_department ON employees(department_id)")
    op.execute("CREATE INDEX idx_employees_manager    ON employees(reporting_manager_id)")

    # ── 3. user_roles / user_credentials ──────────────────────────────────
    op.execute("""
        CREATE TABLE user_roles (
            id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id UUID NOT NULL UNIQUE REFERENCES employees(id) ON DELETE CASCADE,
            role        user_role NOT NULL,
            assigned_by UUID REFERENCES employees(id),
            assigned_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE TABLE user_credentials (
            employee_id          UUID PRIMARY KEY REFERENCES employees(id) ON DELETE CASCADE,
            password_hash        VARCHAR(255) NOT NULL,
            must_change_password BOOLEAN DEFAULT TRUE,
            created_at           TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # ── 4. leave_types ────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE leave_types (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            code         VARCHAR(10)  NOT NULL UNIQUE,
            name         VARCHAR(100) NOT NULL,
            description  TEXT,
            default_days NUMERIC(5,1) DEFAULT 0,
            is_paid      BOOLEAN DEFAULT TRUE,
            is_active    BOOLEAN DEFAULT TRUE,
            created_at   TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # ── 5. leave_balances ─────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE leave_balances (
            id                   UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id          UUID NOT NULL REFERENCES employees(id),
            leave_type_id        UUID NOT NULL REFERENCES leave_types(id),
            year                 INTEGER NOT NULL,
            entitled_days        NUMERIC(5,1) NOT NULL DEFAULT 0,
            used_days            NUMERIC(5,1) NOT NULL DEFAULT 0,
            carried_forward_days NUMERIC(5,1) NOT NULL DEFAULT 0,
            adjusted_days        NUMERIC(5,1) NOT NULL DEFAULT 0,
            updated_at           TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT uq_leave_balance UNIQUE (employee_id, leave_type_id, year)
        )
    """)

    # ── 6. leave_applications ─────────────────────────────────────────────
    op.execute("""
        CREATE TABLE leave_applications (
            id            UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id   UUID NOT NULL REFERENCES employees(id),
            leave_type_id UUID REFERENCES leave_types(id),
            start_date    DATE NOT NULL,
            end_date      DATE NOT NULL,
            days_count    NUMERIC(5,1) NOT NULL,
            is_half_day   BOOLEAN DEFAULT FALSE,
            reason        TEXT,
            status        leave_status NOT NULL DEFAULT 'pending',
            is_lop        BOOLEAN DEFAULT FALSE,
            lop_days      NUMERIC(5,1) NOT NULL DEFAULT 0,
            reviewed_by   UUID REFERENCES employees(id),
            reviewed_at   TIMESTAMPTZ,
            remarks       TEXT,
            cancelled_at  TIMESTAMPTZ,
            created_at    TIMESTAMPTZ DEFAULT NOW(),
            updated_at    TIMESTAMPTZ DEFAULT NOW(),
            CHECK (end_date >= start_date)
        )
    """)
    op.execute(
        "CREATE INDEX ix_leave_applications_employee_status "
        "ON leave_applications(employee_id, status)"
    )
    op.execute(
        "CREATE INDEX ix_leave_applications_start_date ON leave_applications(start_date)"
    )

    # ── 7. holidays ───────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE holidays (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            name         VARCHAR(200) NOT NULL,
            date         DATE NOT NULL,
            year         INTEGER NOT NULL,
            is_national  BOOLEAN NOT NULL DEFAULT FALSE,
            is_optional  BOOLEAN NOT NULL DEFAULT FALSE,
            states       JSONB,
            holiday_type holiday_type NOT NULL DEFAULT 'company',
            description  TEXT,
            created_at   TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at   TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            created_by   UUID REFERENCES employees(id),
            updated_by   UUID REFERENCES employees(id),
            CONSTRAINT uq_holiday_name_date UNIQUE (name, date)
        )
    """)
    op.execute("CREATE INDEX ix_holidays_year ON holidays(year)")

    # ── 8. notifications ──────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE notifications (
            id                     UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            recipient_id           UUID NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            type                   notification_type DEFAULT 'general',
            title                  VARCHAR(200) NOT NULL,
            message                TEXT NOT NULL,
            related_application_id UUID REFERENCES leave_applications(id) ON DELETE SET NULL,
            is_read                BOOLEAN DEFAULT FALSE,
            read_at                TIMESTAMPTZ,
            created_at             TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute(
        "CREATE INDEX ix_notifications_recipient_read ON notifications(recipient_id, is_read)"
    )

    # ── 9. notification_preferences ───────────────────────────────────────
    op.execute("""
        CREATE TABLE notification_preferences (
            id                UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            new_leave_request BOOLEAN NOT NULL DEFAULT TRUE,
            leave_approved    BOOLEAN NOT NULL DEFAULT TRUE,
            leave_rejected    BOOLEAN NOT NULL DEFAULT TRUE,
            low_balance_alert BOOLEAN NOT NULL DEFAULT TRUE,
            upcoming_holiday  BOOLEAN NOT NULL DEFAULT TRUE,
            probation_ending  BOOLEAN NOT NULL DEFAULT TRUE,
            updated_at        TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # ── 10. organization_settings ─────────────────────────────────────────
    op.execute("""
        CREATE TABLE organization_settings (
            id                    UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            name                  VARCHAR(200) NOT NULL,
            email                 VARCHAR(255),
            address               TEXT,
            fiscal_year_start     VARCHAR(20),
            working_days          VARCHAR(100),
            leave_policy_url      VARCHAR(500),
            employee_handbook_url VARCHAR(500),
            posh_policy_url       VARCHAR(500),
            cpp_url               VARCHAR(500),
            created_at            TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at            TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            created_by            UUID REFERENCES employees(id),
            updated_by            UUID REFERENCES employees(id)
        )
    """)

    # ── 11. announcement_banners ──────────────────────────────────────────
    op.execute("""
        CREATE TABLE announcement_banners (
            id         UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            message    TEXT NOT NULL DEFAULT '',
            color      banner_color NOT NULL DEFAULT 'yellow',
            is_active  BOOLEAN NOT NULL DEFAULT TRUE,
            position   INTEGER NOT NULL UNIQUE,
            created_at TIMESTAMPTZ DEFAULT NOW(),
            updated_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # ── 12. audit_logs ────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE audit_logs (
            id         UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            actor_id   UUID REFERENCES employees(id),
            action     VARCHAR(50) NOT NULL,
            table_name VARCHAR(50) NOT NULL,
            record_id  UUID,
            old_values JSONB,
            new_values JSONB,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_audit_logs_actor_id   ON audit_logs(actor_id)")
    op.execute("CREATE INDEX ix_audit_logs_record     ON audit_logs(table_name, record_id)")
    op.execute("CREATE INDEX ix_audit_logs_created_at ON audit_logs(created_at)")

    # ══════════════════════════════════════════════════════════════════════
    # SEED DATA
    # ══════════════════════════════════════════════════════════════════════

    # Leave types
    op.execute("""
        INSERT INTO leave_types (code, name, description, default_days, is_paid) VALUES
            ('CL', 'Casual Leave',   'For personal or urgent work',            12, TRUE),
            ('SL', 'Sick Leave',     'Medical leave',                          12, TRUE),
            ('EL', 'Earned Leave',   'Earned / privilege leave',               15, TRUE),
            ('RH', 'Restricted Holiday', 'Optional regional holidays (max 6)',  6, TRUE),
            ('LWP', 'Leave Without Pay', 'Unpaid leave; every day is LOP',      0, FALSE)
    """)

    # Notification preferences (single row, all on)
    op.execute("INSERT INTO notification_preferences DEFAULT VALUES")


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    # Drop tables in reverse dependency order
    tables = [
        "audit_logs",
        "announcement_banners",
        "organization_settings",
        "notification_preferences",
        "notifications",
        "holidays",
        "leave_applications",
        "leave_balances",
        "leave_types",
        "user_credentials",
        "user_roles",
        "employees",
        "departments",
    ]
    for t in tables:
        op.execute(f"DROP TABLE IF EXISTS {t} CASCADE")

    # Drop enum types
    for name, _ in reversed(ENUM_TYPES):
        _drop_enum(name)

    op.execute('DROP EXTENSION IF EXISTS "uuid-ossp"')
