"""
Catalog of the self-hosted applications that can be deployed.

The set of applications is closed: AppId enumerates every deployable app and
the rule registry must provide an entry for each member.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple


class AppId(Enum):
    """Deployable application identifiers (wire value = request 'app_id')"""
    NEXTCLOUD = "nextcloud"
    IMMICH = "immich"
    VAULTWARDEN = "vaultwarden"
    JELLYFIN = "jellyfin"
    NAVIDROME = "navidrome"
    JOPLIN_SERVER = "joplin-server"

    @classmethod
    def parse(cls, app_id: Optional[str]) -> Optional["AppId"]:
        """Map a request identifier to an AppId, or None if it is not in the catalog."""
        try:
            return cls(app_id)
        except ValueError:
            return None


@dataclass(frozen=True)
class AppDefinition:
    app_id: AppId
    title: str
    description: str
    sensitive_fields: Tuple[str, ...] = ()


APP_CATALOG: Dict[AppId, AppDefinition] = {
    AppId.NEXTCLOUD: AppDefinition(
        app_id=AppId.NEXTCLOUD,
        title="Nextcloud Hub",
        description="Personal cloud storage and productivity suite",
        sensitive_fields=("adminPassword",),
    ),
    AppId.IMMICH: AppDefinition(
        app_id=AppId.IMMICH,
        title="Immich Photo Server",
        description="Private photo and video backup solution",
        sensitive_fields=("dbPassword",),
    ),
    AppId.VAULTWARDEN: AppDefinition(
        app_id=AppId.VAULTWARDEN,
        title="Vaultwarden Password Manager",
        description="Secure self-hosted password vault",
        sensitive_fields=("adminToken",),
    ),
    AppId.JELLYFIN: AppDefinition(
        app_id=AppId.JELLYFIN,
        title="Jellyfin Media Server",
        description="Personal media streaming server",
    ),
    AppId.NAVIDROME: AppDefinition(
        app_id=AppId.NAVIDROME,
        title="Navidrome Music Server",
        description="Personal music streaming service",
    ),
    AppId.JOPLIN_SERVER: AppDefinition(
        app_id=AppId.JOPLIN_SERVER,
        title="Joplin Sync Server",
        description="Note synchronization for Joplin clients",
        sensitive_fields=("dbPassword",),
    ),
}

assert set(APP_CATALOG) == set(AppId), "APP_CATALOG must describe every AppId"
