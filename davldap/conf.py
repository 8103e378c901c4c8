"""
LDAP authentication backend configuration.

This module provides the :py:class:`LdapAuthConfig` record that an
:py:class:`~davldap.backends.LdapBackend` is built from, and the code that
loads it from the ``DAV_LDAP_AUTH`` Django setting.
"""

from dataclasses import dataclass
from typing import Any

import ldapurl
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

#: The name of the Django setting that holds our server configurations.
SETTING_NAME = "DAV_LDAP_AUTH"


@dataclass(frozen=True)
class LdapAuthConfig:
    """
    Configuration for one LDAP authentication backend.

    This is validated once, when it is constructed, and never changes
    afterwards.

    Raises:
        ImproperlyConfigured: ``uri`` is not an LDAP URL, or one of the other
            values is empty.

    """

    #: The LDAP server URI, e.g. ``ldaps://ldap.example.org``
    uri: str
    #: The DN pattern used for binding.  See
    #: :py:func:`~davldap.dn.expand_dn_template` for the placeholders.
    dn_template: str = "mail=%u"
    #: The LDAP attribute to use for the user's display name
    display_name_attribute: str = "cn"
    #: The LDAP attribute to use for the user's email address
    mail_attribute: str = "mail"

    def __post_init__(self) -> None:
        if not isinstance(self.uri, str) or not ldapurl.isLDAPUrl(self.uri):
            msg = f"{SETTING_NAME}: {self.uri!r} is not an LDAP URL"
            raise ImproperlyConfigured(msg)
        for field_name in ("dn_template", "display_name_attribute", "mail_attribute"):
            value = getattr(self, field_name)
            if not isinstance(value, str) or not value:
                msg = f"{SETTING_NAME}: {field_name} must be a non-empty string"
                raise ImproperlyConfigured(msg)

    @classmethod
    def from_settings(cls, name: str = "default") -> "LdapAuthConfig":
        """
        Build a configuration from ``settings.DAV_LDAP_AUTH[name]``.

        Example:
            .. code-block:: python

                DAV_LDAP_AUTH = {
                    "default": {
                        "url": "ldaps://ldap.example.org",
                        "dn_template": "uid=%U,ou=people,dc=%2,dc=%1",
                    }
                }

        Args:
            name: The key into ``settings.DAV_LDAP_AUTH``.

        Raises:
            ImproperlyConfigured: the setting is missing, ``name`` is not in
                it, or the configuration in it is invalid.

        Returns:
            The validated configuration.

        """
        servers: dict[str, dict[str, Any]] | None = getattr(
            settings, SETTING_NAME, None
        )
        if not servers:
            msg = f"settings.{SETTING_NAME} is not set"
            raise ImproperlyConfigured(msg)
        try:
            config = servers[name]
        except KeyError as e:
            msg = f"settings.{SETTING_NAME} has no server named {name!r}"
            raise ImproperlyConfigured(msg) from e
        if "url" not in config:
            msg = f"settings.{SETTING_NAME}[{name!r}] has no 'url'"
            raise ImproperlyConfigured(msg)
        kwargs = {
            key: config[key]
            for key in ("dn_template", "display_name_attribute", "mail_attribute")
            if key in config
        }
        return cls(config["url"], **kwargs)
