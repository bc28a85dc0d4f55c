"""Built-in entity catalogue of the content admin panel.

Each ``Entity`` maps to exactly one ``TableConfig``.  The registry is
checked when this module is imported: every entity must have a config whose
``model_name`` matches the entity value.

Usage:
    from record_table.schema.entities import Entity, get_table_config

    config = get_table_config(Entity.TAG)
    config = get_table_config("PostTag")
"""

from enum import Enum
from typing import Any

from record_table.errors import ConfigError
from record_table.schema.fields import FieldSpec, FieldType, TableConfig


class Entity(str, Enum):
    """Entities exposed by the content data API."""

    USER = "User"
    POST = "Post"
    CATEGORY = "Category"
    TAG = "Tag"
    POST_TAG = "PostTag"
    POST_CATEGORY = "PostCategory"
    SETTING = "Setting"
    TODO = "Todo"


# ============================================================================
# Display renderers
# ============================================================================


def _indicator(on: str, off: str):
    def render(value: Any, record: dict) -> str:
        return on if value else off

    return render


def render_color(value: Any, record: dict) -> str:
    """Colour swatch followed by the hex value."""
    return f"● {value}" if value else "-"


def render_excerpt(value: Any, record: dict) -> str:
    """First 100 characters of post content."""
    return f"{value[:100]}..." if value else "-"


def render_status(value: Any, record: dict) -> str:
    """Post status as a bracketed badge."""
    return f"[{value}]" if value else "-"


# ============================================================================
# Shared fields
# ============================================================================


def _id() -> FieldSpec:
    return FieldSpec(key="id", label="ID", type="text")


def _created() -> FieldSpec:
    return FieldSpec(key="createdAt", label="Created", type="datetime")


def _updated() -> FieldSpec:
    return FieldSpec(key="updatedAt", label="Updated", type="datetime")


# ============================================================================
# Registry
# ============================================================================


ENTITY_CONFIGS: dict[Entity, TableConfig] = {
    Entity.USER: TableConfig(
        model_name="User",
        title="Users",
        table_name="users",
        fields=[
            _id(),
            FieldSpec(key="email", label="Email", required=True),
            FieldSpec(key="firstName", label="First Name"),
            FieldSpec(key="lastName", label="Last Name"),
            FieldSpec(
                key="role",
                label="Role",
                type="enum",
                options=["USER", "ADMIN", "SUPER_ADMIN"],
            ),
            FieldSpec(
                key="isActive",
                label="Active",
                type="boolean",
                render=_indicator("✅ Active", "❌ Inactive"),
            ),
            FieldSpec(key="lastLoginAt", label="Last Login", type="datetime"),
            _created(),
        ],
        search_fields=["email", "firstName", "lastName"],
    ),
    Entity.POST: TableConfig(
        model_name="Post",
        title="Posts",
        table_name="posts",
        fields=[
            _id(),
            FieldSpec(key="title", label="Title", required=True),
            FieldSpec(key="content", label="Content", render=render_excerpt),
            FieldSpec(
                key="status",
                label="Status",
                type="enum",
                options=["DRAFT", "PUBLISHED", "ARCHIVED"],
                render=render_status,
            ),
            FieldSpec(key="publishedAt", label="Published", type="datetime"),
            _created(),
        ],
        search_fields=["title", "content"],
    ),
    Entity.CATEGORY: TableConfig(
        model_name="Category",
        title="Categories",
        table_name="categories",
        fields=[
            _id(),
            FieldSpec(key="name", label="Name", required=True),
            FieldSpec(key="slug", label="Slug", required=True),
            FieldSpec(key="description", label="Description"),
            FieldSpec(
                key="isActive",
                label="Active",
                type="boolean",
                render=_indicator("✅", "❌"),
            ),
            _created(),
        ],
        search_fields=["name", "slug", "description"],
    ),
    Entity.TAG: TableConfig(
        model_name="Tag",
        title="Tags",
        table_name="tags",
        fields=[
            _id(),
            FieldSpec(key="name", label="Name", required=True),
            FieldSpec(key="slug", label="Slug", required=True),
            FieldSpec(key="color", label="Color", render=render_color),
            _created(),
        ],
        search_fields=["name", "slug"],
    ),
    Entity.POST_TAG: TableConfig(
        model_name="PostTag",
        title="Post Tags",
        table_name="post_tags",
        fields=[
            _id(),
            FieldSpec(key="postId", label="Post ID", required=True),
            FieldSpec(key="tagId", label="Tag ID", required=True),
            _created(),
            _updated(),
        ],
        search_fields=["postId", "tagId"],
    ),
    Entity.POST_CATEGORY: TableConfig(
        model_name="PostCategory",
        title="Post Categories",
        table_name="post_categories",
        fields=[
            _id(),
            FieldSpec(key="postId", label="Post ID", required=True),
            FieldSpec(key="categoryId", label="Category ID", required=True),
            _created(),
            _updated(),
        ],
        search_fields=["postId", "categoryId"],
    ),
    Entity.SETTING: TableConfig(
        model_name="Setting",
        title="Settings",
        table_name="settings",
        fields=[
            _id(),
            FieldSpec(key="key", label="Key", required=True),
            FieldSpec(key="value", label="Value"),
            FieldSpec(
                key="type",
                label="Type",
                type="enum",
                options=["STRING", "NUMBER", "BOOLEAN", "JSON"],
            ),
            FieldSpec(key="description", label="Description"),
            FieldSpec(
                key="isPublic",
                label="Public",
                type="boolean",
                render=_indicator("🌐 Public", "🔒 Private"),
            ),
            _created(),
        ],
        search_fields=["key", "description"],
    ),
    Entity.TODO: TableConfig(
        model_name="Todo",
        title="Todos",
        table_name="todos",
        fields=[
            _id(),
            FieldSpec(key="content", label="Content", required=True),
            FieldSpec(
                key="isDone",
                label="Completed",
                type="boolean",
                render=_indicator("✅ Done", "⏳ Pending"),
            ),
            _created(),
            _updated(),
        ],
        search_fields=["content"],
    ),
}


def _check_registry() -> None:
    missing = [entity.value for entity in Entity if entity not in ENTITY_CONFIGS]
    if missing:
        raise ConfigError(f"Entities without a table config: {', '.join(missing)}")
    for entity, config in ENTITY_CONFIGS.items():
        if config.model_name != entity.value:
            raise ConfigError(
                f"Entity {entity.value} is bound to config for {config.model_name}"
            )


_check_registry()


def resolve_entity(name: "Entity | str") -> Entity:
    """Resolve an entity from its enum member, model name, or table name.

    Matching on names is case-insensitive (``"tag"``, ``"Tag"``, ``"tags"``).

    Raises:
        ConfigError: If no entity matches.
    """
    if isinstance(name, Entity):
        return name
    lowered = name.lower()
    for entity, config in ENTITY_CONFIGS.items():
        if lowered in (entity.value.lower(), (config.table_name or "").lower()):
            return entity
    available = ", ".join(entity.value for entity in Entity)
    raise ConfigError(f"Unknown entity '{name}'. Available: {available}")


def get_table_config(name: "Entity | str") -> TableConfig:
    """Return the table config registered for an entity."""
    return ENTITY_CONFIGS[resolve_entity(name)]


def datetime_columns() -> list[str]:
    """Keys of every datetime field across the registered entities."""
    keys = {
        spec.key
        for config in ENTITY_CONFIGS.values()
        for spec in config.fields
        if spec.type is FieldType.DATETIME
    }
    return sorted(keys)
