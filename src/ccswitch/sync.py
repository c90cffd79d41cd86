# Provider projection onto the external tool config files
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from ccswitch.models import ConfigWriter, Provider

logger = logging.getLogger(__name__)


@dataclass
class SwitchReport:
    """Result of switching an app to a provider.

    ABOUTME: projected is False when the provider was missing or the app has no writer
    """
    app: str
    provider_id: str
    projected: bool = False
    paths: list[str] = field(default_factory=list)


def apply_provider(
    app: str,
    provider: Provider,
    writers: Mapping[str, ConfigWriter],
) -> SwitchReport:
    """Write a provider's settings into its app's external config.

    ABOUTME: Dispatches to the app's writer, which performs an additive merge
    ABOUTME: Writer errors (bad TOML, unwritable file) propagate to the caller

    Args:
        app: App id the provider belongs to
        provider: Provider whose settings_config is projected
        writers: Writers keyed by app id

    Returns:
        SwitchReport listing the files that were rewritten
    """
    report = SwitchReport(app=app, provider_id=provider.id)

    writer = writers.get(app)
    if writer is None:
        logger.warning("No config writer for app '%s', skipping projection", app)
        return report

    writer.apply(provider.settings_config)
    report.projected = True
    report.paths = [str(p) for p in writer.paths]
    logger.info("Switched %s to provider %s (%s)", writer.name, provider.id, provider.name)
    return report
