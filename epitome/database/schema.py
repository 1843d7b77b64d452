"""
Database Schema Definitions.

Contains SQL statements for schema creation and migrations.
Structured fields (stat maps, enhancement tables, tags, metadata) are
stored as JSON text and decoded by the repositories.
"""

# Current schema version. Increment if schema structure changes.
SCHEMA_VERSION = 2

# Full schema creation SQL for fresh databases
CREATE_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    version INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    discord_id TEXT UNIQUE,
    email TEXT,
    name TEXT,
    username TEXT,
    image TEXT,
    role TEXT NOT NULL DEFAULT 'USER',
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS builds (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    description TEXT,
    guide TEXT,
    class TEXT NOT NULL,
    level INTEGER NOT NULL DEFAULT 1,
    tags_json TEXT,
    stats_allocation_json TEXT,
    equipment_json TEXT,
    skills_json TEXT,
    skill_path_json TEXT,
    is_published BOOLEAN NOT NULL DEFAULT 1,
    upvotes INTEGER NOT NULL DEFAULT 0,
    downvotes INTEGER NOT NULL DEFAULT 0,
    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS votes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    value INTEGER NOT NULL,            -- 1 = upvote, -1 = downvote
    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    build_id INTEGER NOT NULL REFERENCES builds(id) ON DELETE CASCADE,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    UNIQUE (user_id, build_id)
);

CREATE TABLE IF NOT EXISTS items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    slug TEXT NOT NULL UNIQUE,
    description TEXT,
    type TEXT NOT NULL,
    rarity TEXT NOT NULL DEFAULT 'COMMON',
    level INTEGER NOT NULL DEFAULT 1,
    image_url TEXT,
    is_gear BOOLEAN NOT NULL DEFAULT 0,
    stats_json TEXT,
    required_level INTEGER,
    required_class TEXT,
    drop_sources_json TEXT,
    craft_recipe_json TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    -- v2 columns for gear enhancement
    enhancement_bonuses_json TEXT,
    enhancement_materials_json TEXT
);

CREATE TABLE IF NOT EXISTS enchantments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    slug TEXT NOT NULL UNIQUE,
    description TEXT,
    image_url TEXT,
    min_value INTEGER NOT NULL,
    max_value INTEGER NOT NULL,
    stat_key TEXT NOT NULL,
    equipment_types_json TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS mobs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    slug TEXT NOT NULL UNIQUE,
    description TEXT,
    level INTEGER NOT NULL DEFAULT 1,
    xp_reward INTEGER NOT NULL DEFAULT 0,
    respawn_time INTEGER NOT NULL DEFAULT 300,
    mob_type TEXT NOT NULL,
    category TEXT NOT NULL,
    biome TEXT,
    image_url TEXT,
    stats_json TEXT,
    drops_json TEXT,
    archon_drop_min INTEGER,
    archon_drop_max INTEGER,
    is_active BOOLEAN NOT NULL DEFAULT 1,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS class_info (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    class TEXT NOT NULL UNIQUE,
    name TEXT NOT NULL,
    description TEXT,
    image_url TEXT,
    color TEXT,
    primary_stat TEXT,
    secondary_stat TEXT,
    difficulty TEXT,
    playstyle_json TEXT,
    strengths_json TEXT,
    weaknesses_json TEXT,
    stat_scaling_json TEXT,
    sort_order INTEGER NOT NULL DEFAULT 0,
    is_active BOOLEAN NOT NULL DEFAULT 1,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS guides (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    slug TEXT NOT NULL UNIQUE,
    content TEXT NOT NULL,
    excerpt TEXT,
    category TEXT NOT NULL,
    is_published BOOLEAN NOT NULL DEFAULT 0,
    is_featured BOOLEAN NOT NULL DEFAULT 0,
    view_count INTEGER NOT NULL DEFAULT 0,
    meta_title TEXT,
    meta_description TEXT,
    author_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS trade_listings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    description TEXT,
    item_id INTEGER REFERENCES items(id) ON DELETE SET NULL,
    item_name TEXT NOT NULL,
    item_type TEXT NOT NULL,
    item_rarity TEXT NOT NULL,
    item_image_url TEXT,
    is_gear BOOLEAN NOT NULL DEFAULT 0,
    enhancement_level INTEGER NOT NULL DEFAULT 0,
    enchantments_json TEXT,
    price_amount INTEGER NOT NULL,
    price_currency TEXT NOT NULL,     -- ARCHON or PREMIUM
    status TEXT NOT NULL DEFAULT 'ACTIVE',
    view_count INTEGER NOT NULL DEFAULT 0,
    seller_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS trade_comments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    content TEXT NOT NULL,
    listing_id INTEGER NOT NULL REFERENCES trade_listings(id) ON DELETE CASCADE,
    author_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS map_markers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    description TEXT,
    type TEXT NOT NULL,
    x REAL NOT NULL,
    y REAL NOT NULL,
    icon_url TEXT,
    mob_id INTEGER REFERENCES mobs(id) ON DELETE SET NULL,
    metadata_json TEXT,
    is_active BOOLEAN NOT NULL DEFAULT 1,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS gear_stats (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    display_name TEXT NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS mob_types (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    display_name TEXT NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_builds_user ON builds(user_id);
CREATE INDEX IF NOT EXISTS idx_builds_class ON builds(class);
CREATE INDEX IF NOT EXISTS idx_items_type ON items(type);
CREATE INDEX IF NOT EXISTS idx_listings_status ON trade_listings(status);
CREATE INDEX IF NOT EXISTS idx_comments_listing ON trade_comments(listing_id);
CREATE INDEX IF NOT EXISTS idx_markers_type ON map_markers(type);
"""

# Whitelist of column names that migrations may ALTER TABLE ADD.
# Prevents SQL injection through f-string column names.
ALLOWED_MIGRATION_COLUMNS = {
    "enhancement_bonuses_json": "TEXT",
    "enhancement_materials_json": "TEXT",
}
