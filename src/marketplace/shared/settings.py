"""Access to the ``[custom]`` section of the domain configuration."""

from protean.utils.globals import current_domain


def custom_setting(name, default=None):
    custom = current_domain.config.get("custom") or {}
    return custom.get(name, default)
