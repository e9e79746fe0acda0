"""Resource definitions for the console's list screens."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple

from adminconsole.domain.models import ExportColumn, FilterField, FilterKind
from adminconsole.errors import UnknownResourceError


@dataclass(frozen=True)
class ResourceDefinition:
    """Static description of one list screen and its backend endpoint."""

    name: str
    endpoint: str
    title: str = ""
    id_field: str = "_id"
    items_keys: Tuple[str, ...] = ()
    total_keys: Tuple[str, ...] = ()
    filter_fields: Tuple[FilterField, ...] = ()
    date_ranges: Tuple[Tuple[str, str], ...] = ()
    export_columns: Tuple[ExportColumn, ...] = ()
    table_columns: Tuple[str, ...] = ()
    # Counters of the screen's summary endpoint; empty when it has none.
    stats_keys: Tuple[str, ...] = ()
    stats_path: str = "/stats"
    # Query parameter names differ from filter names on some endpoints.
    param_aliases: Dict[str, str] = field(default_factory=dict)

    @property
    def display_title(self) -> str:
        return self.title or self.name.replace("-", " ").title()

    @property
    def has_stats(self) -> bool:
        return bool(self.stats_keys)


AUDIT_ACTIONS: Tuple[str, ...] = (
    "USER_CREATED",
    "USER_UPDATED",
    "USER_DELETED",
    "USER_ROLE_CHANGED",
    "USER_STATUS_CHANGED",
    "ADMIN_PROMOTED",
    "ADMIN_DEMOTED",
    "PRODUCT_CREATED",
    "PRODUCT_UPDATED",
    "PRODUCT_DELETED",
    "CATEGORY_CREATED",
    "CATEGORY_UPDATED",
    "CATEGORY_DELETED",
    "ORDER_STATUS_CHANGED",
    "ORDER_CANCELLED",
    "SETTINGS_UPDATED",
    "SYSTEM_BACKUP",
    "SYSTEM_RESTORE",
    "LOGIN_ATTEMPT",
    "LOGOUT",
    "PASSWORD_RESET",
    "OTHER",
)

AUDIT_ENTITIES: Tuple[str, ...] = ("User", "Product", "Category", "Order", "Settings", "System", "Auth")

AUDIT_LOGS = ResourceDefinition(
    name="audit-logs",
    endpoint="/superadmin/audit",
    title="Audit Logs",
    items_keys=("logs", "auditLogs"),
    total_keys=("totalLogs",),
    filter_fields=(
        FilterField("search"),
        FilterField("user"),
        FilterField("actionType", FilterKind.ENUM, choices=AUDIT_ACTIONS, label="Action"),
        FilterField("entity", FilterKind.ENUM, choices=AUDIT_ENTITIES),
        FilterField("startDate", FilterKind.DATE, label="From"),
        FilterField("endDate", FilterKind.DATE, label="To"),
    ),
    date_ranges=(("startDate", "endDate"),),
    export_columns=(
        ExportColumn("Timestamp", "createdAt", kind="timestamp"),
        ExportColumn("User", "user.email", default="system@admin.com"),
        ExportColumn("Action", "action"),
        ExportColumn("Entity", "entity"),
        ExportColumn("Entity ID", "entityId"),
        ExportColumn("Status", "status", default="success"),
        ExportColumn("IP Address", "ipAddress"),
    ),
    table_columns=("createdAt", "user.email", "action", "entity", "status"),
    param_aliases={"user": "userId", "actionType": "action", "entity": "resource"},
)

USERS = ResourceDefinition(
    name="users",
    endpoint="/superadmin/users",
    title="User Management",
    items_keys=("users",),
    total_keys=("totalUsers",),
    filter_fields=(
        FilterField("search", live=True),
        FilterField("role", FilterKind.ENUM, choices=("customer", "admin", "superadmin"), live=True),
        FilterField("status", FilterKind.ENUM, choices=("active", "inactive"), live=True),
    ),
    export_columns=(
        ExportColumn("ID", "_id"),
        ExportColumn("Name", "name"),
        ExportColumn("Email", "email"),
        ExportColumn("Role", "role"),
        ExportColumn("Active", "isActive"),
        ExportColumn("Joined", "createdAt", kind="timestamp"),
    ),
    table_columns=("name", "email", "role", "isActive"),
)

PINCODES = ResourceDefinition(
    name="pincodes",
    endpoint="/superadmin/pincodes",
    title="Pincode Management",
    items_keys=("pincodes",),
    total_keys=("totalPincodes",),
    filter_fields=(
        FilterField("search", live=True),
        FilterField(
            "deliveryZone",
            FilterKind.ENUM,
            choices=("metro", "urban", "semi-urban", "rural"),
            live=True,
            label="Zone",
        ),
        FilterField("isServiceable", FilterKind.BOOLEAN, live=True, label="Serviceable"),
    ),
    export_columns=(
        ExportColumn("Pincode", "pincode"),
        ExportColumn("City", "city"),
        ExportColumn("District", "district"),
        ExportColumn("State", "state"),
        ExportColumn("Delivery Zone", "deliveryZone"),
        ExportColumn("Serviceable", "isServiceable"),
        ExportColumn("Delivery Days", "deliveryDays"),
    ),
    table_columns=("pincode", "city", "state", "deliveryZone", "isServiceable"),
    stats_keys=("total", "serviceable", "nonServiceable"),
)

PRESETS: Dict[str, ResourceDefinition] = {
    preset.name: preset for preset in (AUDIT_LOGS, USERS, PINCODES)
}


def get_preset(name: str) -> ResourceDefinition:
    try:
        return PRESETS[name]
    except KeyError:
        known = ", ".join(sorted(PRESETS))
        raise UnknownResourceError(f"unknown resource {name!r} (known: {known})") from None


__all__ = ["AUDIT_LOGS", "PINCODES", "PRESETS", "USERS", "ResourceDefinition", "get_preset"]
