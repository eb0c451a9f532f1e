# migrations/versions/20261019_0001_initial.py
# Initial schema for the AgencyDesk record service
from alembic import op

# Revision identifiers, used by Alembic.
revision = "20261019_0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Agents
    op.execute("""
    CREATE TABLE IF NOT EXISTS `agents` (
      `id` INT NOT NULL AUTO_INCREMENT,
      `first_name` VARCHAR(100) NOT NULL,
      `last_name` VARCHAR(100) NOT NULL,
      `email` VARCHAR(191) NULL,
      `phone` VARCHAR(32) NULL,
      `license_number` VARCHAR(64) NULL,
      `license_expiration` VARCHAR(32) NULL,
      `commission_percentage` VARCHAR(16) NULL DEFAULT '70.00',
      `override_percentage` VARCHAR(16) NULL,
      `upline_agent_id` INT NULL,
      `bank_name` VARCHAR(191) NULL,
      `bank_account_type` VARCHAR(16) NULL,
      `bank_account_number` VARCHAR(64) NULL,
      `bank_routing_number` VARCHAR(32) NULL,
      `bank_payment_method` VARCHAR(32) NULL DEFAULT 'direct_deposit',
      `notes` TEXT NULL,
      `created_at` DATETIME NOT NULL DEFAULT NOW(),
      `updated_at` DATETIME NOT NULL DEFAULT NOW(),
      PRIMARY KEY (`id`),
      KEY `ix_agents_upline` (`upline_agent_id`),
      CONSTRAINT `fk_agents_upline` FOREIGN KEY (`upline_agent_id`)
        REFERENCES `agents` (`id`) ON DELETE SET NULL
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_0900_ai_ci;
    """)

    # Leads
    op.execute("""
    CREATE TABLE IF NOT EXISTS `leads` (
      `id` INT NOT NULL AUTO_INCREMENT,
      `first_name` VARCHAR(100) NOT NULL,
      `last_name` VARCHAR(100) NOT NULL,
      `email` VARCHAR(191) NULL,
      `phone` VARCHAR(32) NULL,
      `status` VARCHAR(32) NULL,
      `agent_id` INT NULL,
      `created_at` DATETIME NOT NULL DEFAULT NOW(),
      PRIMARY KEY (`id`),
      KEY `ix_leads_agent` (`agent_id`),
      CONSTRAINT `fk_leads_agent` FOREIGN KEY (`agent_id`)
        REFERENCES `agents` (`id`) ON DELETE SET NULL
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_0900_ai_ci;
    """)

    # Clients
    op.execute("""
    CREATE TABLE IF NOT EXISTS `clients` (
      `id` INT NOT NULL AUTO_INCREMENT,
      `name` VARCHAR(191) NOT NULL,
      `email` VARCHAR(191) NULL,
      `phone` VARCHAR(32) NULL,
      `status` VARCHAR(32) NULL,
      `agent_id` INT NULL,
      `lead_id` INT NULL,
      `created_at` DATETIME NOT NULL DEFAULT NOW(),
      PRIMARY KEY (`id`),
      KEY `ix_clients_agent` (`agent_id`),
      KEY `ix_clients_lead` (`lead_id`),
      CONSTRAINT `fk_clients_agent` FOREIGN KEY (`agent_id`)
        REFERENCES `agents` (`id`) ON DELETE SET NULL,
      CONSTRAINT `fk_clients_lead` FOREIGN KEY (`lead_id`)
        REFERENCES `leads` (`id`) ON DELETE SET NULL
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_0900_ai_ci;
    """)

    # Policies
    op.execute("""
    CREATE TABLE IF NOT EXISTS `policies` (
      `id` INT NOT NULL AUTO_INCREMENT,
      `policy_number` VARCHAR(100) NOT NULL,
      `carrier` VARCHAR(191) NOT NULL,
      `policy_type` VARCHAR(64) NOT NULL,
      `face_amount` VARCHAR(32) NULL,
      `premium_amount` VARCHAR(32) NULL,
      `premium_frequency` VARCHAR(16) NULL,
      `issue_date` VARCHAR(32) NULL,
      `expiry_date` VARCHAR(32) NULL,
      `status` VARCHAR(16) NOT NULL DEFAULT 'pending',
      `client_id` INT NULL,
      `lead_id` INT NULL,
      `agent_id` INT NULL,
      `created_at` DATETIME NOT NULL DEFAULT NOW(),
      `updated_at` DATETIME NOT NULL DEFAULT NOW(),
      PRIMARY KEY (`id`),
      UNIQUE KEY `ux_policies_carrier_number` (`carrier`,`policy_number`),
      KEY `ix_policies_agent` (`agent_id`),
      KEY `ix_policies_client` (`client_id`),
      CONSTRAINT `fk_policies_agent` FOREIGN KEY (`agent_id`)
        REFERENCES `agents` (`id`) ON DELETE SET NULL,
      CONSTRAINT `fk_policies_client` FOREIGN KEY (`client_id`)
        REFERENCES `clients` (`id`) ON DELETE SET NULL,
      CONSTRAINT `fk_policies_lead` FOREIGN KEY (`lead_id`)
        REFERENCES `leads` (`id`) ON DELETE SET NULL
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_0900_ai_ci;
    """)

    # Commissions
    op.execute("""
    CREATE TABLE IF NOT EXISTS `commissions` (
      `id` INT NOT NULL AUTO_INCREMENT,
      `name` VARCHAR(191) NULL,
      `policy_number` VARCHAR(100) NOT NULL,
      `client_id` INT NULL,
      `broker_id` INT NULL,
      `amount` VARCHAR(32) NOT NULL,
      `status` VARCHAR(16) NOT NULL DEFAULT 'pending',
      `type` VARCHAR(16) NOT NULL DEFAULT 'initial',
      `policy_start_date` VARCHAR(32) NULL,
      `policy_end_date` VARCHAR(32) NULL,
      `payment_date` VARCHAR(32) NULL,
      `carrier` VARCHAR(191) NULL,
      `policy_type` VARCHAR(64) NULL,
      `notes` TEXT NULL,
      `created_at` DATETIME NOT NULL DEFAULT NOW(),
      PRIMARY KEY (`id`),
      KEY `ix_commissions_broker` (`broker_id`),
      KEY `ix_commissions_client` (`client_id`)
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_0900_ai_ci;
    """)

    # Users (read-only broker directory)
    op.execute("""
    CREATE TABLE IF NOT EXISTS `users` (
      `id` INT NOT NULL AUTO_INCREMENT,
      `username` VARCHAR(100) NOT NULL,
      `full_name` VARCHAR(191) NULL,
      `email` VARCHAR(191) NULL,
      `role` VARCHAR(32) NULL,
      PRIMARY KEY (`id`),
      UNIQUE KEY `ux_users_username` (`username`)
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_0900_ai_ci;
    """)

    # Updates (dashboard announcements)
    op.execute("""
    CREATE TABLE IF NOT EXISTS `updates` (
      `id` INT NOT NULL AUTO_INCREMENT,
      `title` VARCHAR(191) NOT NULL,
      `message` TEXT NOT NULL,
      `type` VARCHAR(32) NOT NULL DEFAULT 'announcement',
      `date` VARCHAR(32) NULL,
      `link` VARCHAR(500) NULL,
      `link_text` VARCHAR(191) NULL,
      PRIMARY KEY (`id`)
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_0900_ai_ci;
    """)


def downgrade():
    for table in ("commissions", "policies", "clients", "leads", "updates", "users", "agents"):
        op.execute(f"DROP TABLE IF EXISTS `{table}`;")
