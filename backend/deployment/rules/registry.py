"""
Rule registry - which rules run for which application.

COMMON_RULES run for every request in the order listed. APP_RULES maps each
catalog application to its additional rules, which run after the common ones
in registration order. Identifiers outside the catalog only get the common
rules.
"""

from functools import partial
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from deployment.catalog import AppId
from deployment.diagnostics import Diagnostic
from deployment.rules import apps, common
from deployment.rules.base import Rule


def _per_field(name: str, check: Callable[..., List[Diagnostic]], fields: Iterable[str]) -> Tuple[Rule, ...]:
    return tuple(Rule(name=name, field=field, check=partial(check, field=field)) for field in fields)


COMMON_RULES: Tuple[Rule, ...] = (
    (Rule(name='domain', field=common.DOMAIN_FIELD, check=common.check_domain),)
    + _per_field('path', common.check_path, common.PATH_FIELDS)
    + _per_field('port', common.check_port, common.PORT_FIELDS)
    + _per_field('password', common.check_password, common.PASSWORD_FIELDS)
    + _per_field('email', common.check_email, common.EMAIL_FIELDS)
)

APP_RULES: Dict[AppId, Tuple[Rule, ...]] = {
    AppId.NEXTCLOUD: (
        Rule(name='nextcloud.storage', field='storage', check=apps.check_storage_capacity),
    ),
    AppId.IMMICH: (
        Rule(name='immich.machinelearning', field='machinelearning', check=apps.check_machine_learning),
    ),
    AppId.VAULTWARDEN: (
        Rule(name='vaultwarden.smtp', field='smtpHost', check=apps.check_smtp_host),
    ),
    AppId.JELLYFIN: (
        Rule(name='jellyfin.media', field='mediaPath', check=apps.check_media_library),
    ),
    AppId.NAVIDROME: (
        Rule(name='navidrome.scan_interval', field='scanInterval', check=apps.check_scan_interval),
    ),
    AppId.JOPLIN_SERVER: (
        Rule(name='joplin.max_item_size', field='maxItemSize', check=apps.check_max_item_size),
    ),
}

assert set(APP_RULES) == set(AppId), "APP_RULES must have an entry for every AppId"


def rules_for(app_id: Union[AppId, str, None]) -> Tuple[Rule, ...]:
    """Common rules followed by the application's own rules (if it is in the catalog)."""
    app: Optional[AppId] = app_id if isinstance(app_id, AppId) else AppId.parse(app_id)
    if app is None:
        return COMMON_RULES
    return COMMON_RULES + APP_RULES[app]
