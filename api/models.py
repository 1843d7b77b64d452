"""
api.models - Pydantic models for API request/response schemas.

These models provide type-safe data validation for all API endpoints.
Resource bodies in responses are plain dicts produced by the
repositories; the envelopes around them are typed here.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

from epitome.game_data import BUILD_TAGS
from epitome.map_markers import MARKER_TYPES


# ==============================================================================
# Enums
# ==============================================================================


class CharacterClassName(str, Enum):
    """Playable classes."""

    WARRIOR = "WARRIOR"
    NINJA = "NINJA"
    SHAMAN = "SHAMAN"
    NECROMANCER = "NECROMANCER"


class ItemTypeName(str, Enum):
    WEAPON = "WEAPON"
    HELMET = "HELMET"
    ARMOR = "ARMOR"
    GLOVES = "GLOVES"
    BOOTS = "BOOTS"
    SHIELD = "SHIELD"
    NECKLACE = "NECKLACE"
    EARRING = "EARRING"
    RING = "RING"
    CONSUMABLE = "CONSUMABLE"
    MATERIAL = "MATERIAL"
    QUEST = "QUEST"
    MISC = "MISC"


class RarityName(str, Enum):
    """Item rarity tiers, lowest first."""

    COMMON = "COMMON"
    UNCOMMON = "UNCOMMON"
    RARE = "RARE"
    EPIC = "EPIC"
    LEGENDARY = "LEGENDARY"
    MYTHIC = "MYTHIC"


class CurrencyName(str, Enum):
    ARCHON = "ARCHON"
    PREMIUM = "PREMIUM"


class ListingStatusName(str, Enum):
    ACTIVE = "ACTIVE"
    SOLD = "SOLD"
    CANCELLED = "CANCELLED"


class RoleName(str, Enum):
    USER = "USER"
    MODERATOR = "MODERATOR"
    ADMIN = "ADMIN"


class GuideCategory(str, Enum):
    BEGINNER = "BEGINNER"
    CLASS_GUIDE = "CLASS_GUIDE"
    PVP = "PVP"
    PVE = "PVE"
    CRAFTING = "CRAFTING"
    ECONOMY = "ECONOMY"
    ADVANCED = "ADVANCED"


class VoteType(str, Enum):
    UP = "up"
    DOWN = "down"


# ==============================================================================
# Shared
# ==============================================================================


class StatRangeModel(BaseModel):
    """A min..max roll range for one stat."""

    min: int
    max: int

    @model_validator(mode="after")
    def check_order(self) -> "StatRangeModel":
        if self.min > self.max:
            raise ValueError(f"min ({self.min}) must not exceed max ({self.max})")
        return self


class PageResponse(BaseModel):
    """Pagination fields shared by list responses."""

    total: int
    limit: int
    offset: int
    has_more: bool


class SuccessResponse(BaseModel):
    success: bool = True


class PartialUpdate(BaseModel):
    """
    Base for update bodies where omitted fields are left unchanged.

    Fields named in not_nullable back NOT NULL columns, so an explicit
    null for them is rejected instead of reaching the database.
    """

    not_nullable: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode="after")
    def reject_nulls(self) -> "PartialUpdate":
        nulls = [
            name
            for name in self.not_nullable
            if name in self.model_fields_set and getattr(self, name) is None
        ]
        if nulls:
            raise ValueError(f"{', '.join(nulls)} cannot be null")
        return self


# ==============================================================================
# Health / Config
# ==============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall health status")
    version: str
    database: str = Field(..., description="Database connection status")
    schema_version: Optional[int] = None
    services: Dict[str, str] = Field(default_factory=dict)


class ConfigResponse(BaseModel):
    """Public, non-sensitive configuration for clients."""

    version: str
    discord_login_enabled: bool
    map: Dict[str, Any]
    max_page_size: int


# ==============================================================================
# Auth
# ==============================================================================


class SessionResponse(BaseModel):
    authenticated: bool
    user: Optional[Dict[str, Any]] = None
    is_admin: bool = False
    is_moderator: bool = False


class LoginResponse(BaseModel):
    authorization_url: str
    state: str


class TokenResponse(BaseModel):
    token: str
    user: Dict[str, Any]


# ==============================================================================
# Builds
# ==============================================================================


class EnchantmentInstance(BaseModel):
    """An enchantment applied to an equipped item, with its rolled value."""

    id: Optional[int] = None
    name: str = ""
    stat_key: str = ""
    value: int = 0
    min_value: Optional[int] = None
    max_value: Optional[int] = None


class EquippedItemModel(BaseModel):
    """An item in a build slot."""

    id: Optional[int] = None
    name: str = ""
    type: str = ""
    rarity: Optional[str] = None
    image_url: Optional[str] = None
    # Values may be {min, max} ranges or legacy bare numbers
    stats: Dict[str, Any] = Field(default_factory=dict)
    enhancement_level: int = 0
    enhancement_bonuses: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    enchantments: List[EnchantmentInstance] = Field(default_factory=list)


class _BuildFields(BaseModel):
    @field_validator("tags", check_fields=False)
    @classmethod
    def check_tags(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is None:
            return value
        unknown = [tag for tag in value if tag not in BUILD_TAGS]
        if unknown:
            raise ValueError(f"Unknown tags: {', '.join(unknown)}")
        return list(dict.fromkeys(value))


class BuildCreate(_BuildFields):
    """Request body for saving a new build."""

    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    guide: Optional[str] = None
    character_class: CharacterClassName
    level: int = Field(1, ge=1, le=20)
    tags: List[str] = Field(default_factory=list)
    stats_allocation: Dict[str, int] = Field(default_factory=dict)
    equipment: Optional[Dict[str, Optional[EquippedItemModel]]] = None
    skill_points: Dict[str, int] = Field(default_factory=dict)
    skill_path: Optional[List[Any]] = None
    is_published: bool = True


class BuildUpdate(_BuildFields, PartialUpdate):
    """Partial update; only fields that are sent are changed."""

    not_nullable = ("title", "character_class", "level", "is_published")

    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    guide: Optional[str] = None
    character_class: Optional[CharacterClassName] = None
    level: Optional[int] = Field(None, ge=1, le=20)
    tags: Optional[List[str]] = None
    stats_allocation: Optional[Dict[str, int]] = None
    equipment: Optional[Dict[str, Optional[EquippedItemModel]]] = None
    skill_points: Optional[Dict[str, int]] = None
    skill_path: Optional[List[Any]] = None
    is_published: Optional[bool] = None


class BuildsListResponse(PageResponse):
    builds: List[Dict[str, Any]]


class VoteRequest(BaseModel):
    vote_type: VoteType


class VoteResponse(BaseModel):
    upvotes: int
    downvotes: int
    user_vote: Optional[VoteType] = None


class BuildStatsRequest(BaseModel):
    """Stateless planner calculation input."""

    level: int = Field(1, ge=1, le=20)
    character_class: Optional[CharacterClassName] = None
    stats_allocation: Dict[str, int] = Field(default_factory=dict)
    equipment: Dict[str, Optional[EquippedItemModel]] = Field(default_factory=dict)


class BuildStatsResponse(BaseModel):
    equipment_stats: Dict[str, int]
    calculated_stats: Dict[str, float]
    stat_points_total: int
    stat_points_spent: int
    stat_points_remaining: int
    class_stats: Optional[Dict[str, float]] = None


# ==============================================================================
# Items / Enchantments
# ==============================================================================


class ItemsListResponse(BaseModel):
    items: List[Dict[str, Any]]
    total: int


class ItemStatsResponse(BaseModel):
    item_id: int
    enhancement_level: int
    stats: Dict[str, StatRangeModel]
    totals: Dict[str, int]


class MaterialCostModel(BaseModel):
    item_id: Optional[Any] = None
    item_name: str
    quantity: int


class EnhancementCostResponse(BaseModel):
    item_id: int
    from_level: int
    to_level: int
    materials: List[MaterialCostModel]


class EnchantmentsListResponse(BaseModel):
    enchantments: List[Dict[str, Any]]


# ==============================================================================
# Mobs / Classes / Map
# ==============================================================================


class MobsListResponse(PageResponse):
    mobs: List[Dict[str, Any]]


class ClassesListResponse(BaseModel):
    classes: List[Dict[str, Any]]


class MapMarkersResponse(BaseModel):
    markers: List[Dict[str, Any]]
    map: Dict[str, Any]


# ==============================================================================
# Guides
# ==============================================================================


class GuideCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    category: GuideCategory
    excerpt: Optional[str] = Field(None, max_length=500)
    is_published: bool = False


class GuideUpdate(PartialUpdate):
    not_nullable = ("title", "content", "category", "is_published")

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1)
    excerpt: Optional[str] = Field(None, max_length=500)
    category: Optional[GuideCategory] = None
    is_published: Optional[bool] = None
    meta_title: Optional[str] = Field(None, max_length=200)
    meta_description: Optional[str] = Field(None, max_length=500)


class GuidesListResponse(BaseModel):
    guides: List[Dict[str, Any]]
    total: int


# ==============================================================================
# Market
# ==============================================================================


class ListingCreate(BaseModel):
    """Request body for a new trade listing."""

    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    item_id: Optional[int] = None
    item_name: str = Field(..., min_length=1)
    item_type: ItemTypeName
    item_rarity: RarityName
    item_image_url: Optional[str] = None
    is_gear: bool = False
    enhancement_level: int = Field(0, ge=0, le=9)
    enchantments: List[EnchantmentInstance] = Field(default_factory=list)
    price_amount: int = Field(..., gt=0)
    price_currency: CurrencyName


class ListingUpdate(PartialUpdate):
    not_nullable = ("title", "price_amount", "price_currency", "status")

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    price_amount: Optional[int] = Field(None, gt=0)
    price_currency: Optional[CurrencyName] = None
    status: Optional[ListingStatusName] = None


class ListingsListResponse(PageResponse):
    listings: List[Dict[str, Any]]


class CommentCreate(BaseModel):
    content: str = Field(..., max_length=2000)


class CommentsListResponse(BaseModel):
    comments: List[Dict[str, Any]]


# ==============================================================================
# Tools
# ==============================================================================


class XpTableResponse(BaseModel):
    levels: List[Dict[str, int]]
    xp_between: Optional[int] = None


class SkillEvolutionResponse(BaseModel):
    points: int
    tier: str
    label: str
    icon_path: Optional[str] = None


# ==============================================================================
# Admin
# ==============================================================================


class UsersListResponse(PageResponse):
    users: List[Dict[str, Any]]
    stats: Dict[str, int]


class RoleUpdate(BaseModel):
    role: RoleName


class AdminBuildUpdate(PartialUpdate):
    not_nullable = ("is_published", "title")

    is_published: Optional[bool] = None
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)


class DropSource(BaseModel):
    mob_name: str
    drop_rate: Optional[float] = None
    location: Optional[str] = None


class CraftRecipe(BaseModel):
    materials: List[MaterialCostModel] = Field(default_factory=list)
    npc_name: Optional[str] = None
    gold_cost: Optional[int] = Field(None, ge=0)


class ItemFields(BaseModel):
    description: Optional[str] = None
    image_url: Optional[str] = None
    level: Optional[int] = Field(None, ge=0)
    stats: Optional[Dict[str, StatRangeModel]] = None
    required_level: Optional[int] = Field(None, ge=0)
    required_class: Optional[CharacterClassName] = None
    drop_sources: Optional[List[DropSource]] = None
    craft_recipe: Optional[CraftRecipe] = None
    is_gear: Optional[bool] = None
    # Level -> stat -> range / level -> [materials]; validated by epitome.enhancement
    enhancement_bonuses: Optional[Dict[str, Dict[str, Any]]] = None
    enhancement_materials: Optional[Dict[str, List[Dict[str, Any]]]] = None


class ItemCreate(ItemFields):
    name: str = Field(..., min_length=1, max_length=200)
    slug: Optional[str] = Field(None, max_length=200)
    type: ItemTypeName
    rarity: RarityName


class ItemUpdate(ItemFields, PartialUpdate):
    not_nullable = ("name", "slug", "type", "rarity", "level", "is_gear")

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    slug: Optional[str] = Field(None, min_length=1, max_length=200)
    type: Optional[ItemTypeName] = None
    rarity: Optional[RarityName] = None


class AdminItemsListResponse(PageResponse):
    items: List[Dict[str, Any]]


class MobDrop(BaseModel):
    item_name: str
    item_id: Optional[int] = None
    drop_rate: Optional[float] = None


class MobFields(BaseModel):
    description: Optional[str] = None
    xp_reward: Optional[int] = Field(None, ge=0)
    respawn_time: Optional[int] = Field(None, ge=0)
    mob_type: Optional[str] = None
    category: Optional[str] = None
    biome: Optional[str] = None
    image_url: Optional[str] = None
    stats: Optional[Dict[str, Any]] = None
    drops: Optional[List[MobDrop]] = None
    archon_drop_min: Optional[int] = Field(None, ge=0)
    archon_drop_max: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class MobCreate(MobFields):
    name: str = Field(..., min_length=1, max_length=200)
    slug: Optional[str] = Field(None, max_length=200)
    level: int = Field(..., ge=1)
    mob_type: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)


class MobUpdate(MobFields, PartialUpdate):
    not_nullable = (
        "name", "slug", "level", "xp_reward", "respawn_time", "mob_type", "category", "is_active",
    )

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    slug: Optional[str] = Field(None, min_length=1, max_length=200)
    level: Optional[int] = Field(None, ge=1)


class EnchantmentFields(BaseModel):
    description: Optional[str] = None
    image_url: Optional[str] = None
    equipment_types: Optional[List[ItemTypeName]] = None


class EnchantmentCreate(EnchantmentFields):
    name: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1, max_length=200)
    stat_key: str = Field(..., min_length=1)
    min_value: int
    max_value: int


class EnchantmentUpdate(EnchantmentFields, PartialUpdate):
    not_nullable = ("name", "slug", "stat_key", "min_value", "max_value")

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    slug: Optional[str] = Field(None, min_length=1, max_length=200)
    stat_key: Optional[str] = Field(None, min_length=1)
    min_value: Optional[int] = None
    max_value: Optional[int] = None


class AdminEnchantmentsListResponse(PageResponse):
    enchantments: List[Dict[str, Any]]


class ClassInfoFields(BaseModel):
    description: Optional[str] = None
    image_url: Optional[str] = None
    color: Optional[str] = None
    primary_stat: Optional[str] = None
    secondary_stat: Optional[str] = None
    difficulty: Optional[str] = Field(None, max_length=50)
    playstyle: Optional[List[str]] = None
    strengths: Optional[List[str]] = None
    weaknesses: Optional[List[str]] = None
    stat_scaling: Optional[Dict[str, Any]] = None
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None


class ClassInfoCreate(ClassInfoFields):
    class_key: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=100)


class ClassInfoUpdate(ClassInfoFields, PartialUpdate):
    not_nullable = ("class_key", "name", "sort_order", "is_active")

    class_key: Optional[str] = Field(None, min_length=1, max_length=50)
    name: Optional[str] = Field(None, min_length=1, max_length=100)


class LevelRange(BaseModel):
    min: int = Field(..., ge=0)
    max: int = Field(..., ge=0)

    @model_validator(mode="after")
    def check_order(self) -> "LevelRange":
        if self.min > self.max:
            raise ValueError(f"min ({self.min}) must not exceed max ({self.max})")
        return self


class MarkerMetadata(BaseModel):
    """Free-form popup details; level fields drive the public level filter."""

    level: Optional[int] = Field(None, ge=0)
    levelRange: Optional[LevelRange] = None
    respawnTime: Optional[int] = Field(None, ge=0)
    drops: Optional[List[str]] = None
    notes: Optional[str] = None


class MapMarkerFields(BaseModel):
    description: Optional[str] = None
    icon_url: Optional[str] = None
    mob_id: Optional[int] = None
    metadata: Optional[MarkerMetadata] = None
    is_active: Optional[bool] = None

    @field_validator("type", check_fields=False)
    @classmethod
    def check_type(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in MARKER_TYPES:
            raise ValueError(f"Unknown marker type: {value}")
        return value


class MapMarkerCreate(MapMarkerFields):
    name: str = Field(..., min_length=1, max_length=200)
    type: str
    x: float
    y: float


class MapMarkerUpdate(MapMarkerFields, PartialUpdate):
    not_nullable = ("name", "type", "x", "y", "is_active")

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    type: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None


class AdminMapMarkersListResponse(PageResponse):
    markers: List[Dict[str, Any]]


class TaxonomyEntryCreate(BaseModel):
    """Gear stat or mob type."""

    name: str = Field(..., min_length=1, max_length=100)
    display_name: str = Field(..., min_length=1, max_length=100)


class TaxonomyEntryUpdate(PartialUpdate):
    not_nullable = ("name", "display_name")

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    display_name: Optional[str] = Field(None, min_length=1, max_length=100)
