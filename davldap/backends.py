"""
Basic authentication backends.

This module provides :py:class:`AbstractBasicBackend`, the username/password
contract that a WebDAV server plugs authentication backends into, and
:py:class:`LdapBackend`, which validates credentials by binding to an LDAP
directory as the user.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from .conf import LdapAuthConfig
from .dn import expand_dn_template
from .transport import DirectoryTransport, PythonLdapTransport
from .typing import LDAPAttributes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectoryIdentity:
    """
    Who a user is, according to their own LDAP entry.
    """

    #: The username the user authenticated with
    username: str
    #: The DN we bound as
    dn: str
    #: The value of the configured display name attribute
    display_name: str | None = None
    #: The value of the configured mail attribute
    email: str | None = None


class AbstractBasicBackend(ABC):
    """
    Base class for backends that check a plain username and password.

    Extracting the credentials from the request is the caller's job; subclasses
    only need to implement :py:meth:`validate_user_pass`.
    """

    #: The prefix for the principal path returned by :py:meth:`check`
    principal_prefix: str = "principals/"
    #: The message returned by :py:meth:`check` when the credentials are bad
    failure_message: str = "Username or password was incorrect"

    @abstractmethod
    def validate_user_pass(self, username: str, password: str) -> bool:
        """
        Validate a username and password.

        Args:
            username: The username to validate.
            password: The password to validate.

        Returns:
            True if the credentials are good, False otherwise.

        """

    def check(self, username: str, password: str) -> tuple[bool, str]:
        """
        Check a username and password.

        Args:
            username: The username from the request.
            password: The password from the request.

        Returns:
            ``(True, principal)`` on success, where ``principal`` is the
            user's principal path, or ``(False, message)`` on failure.

        """
        if not username or not self.validate_user_pass(username, password):
            return False, self.failure_message
        return True, f"{self.principal_prefix}{username}"


class LdapBackend(AbstractBasicBackend):
    """
    Authenticate users by binding to an LDAP server as them.

    The bind DN is built from the username with the configured DN template;
    see :py:func:`~davldap.dn.expand_dn_template`.

    Every call opens its own connection and closes it before returning, so one
    backend can be shared between threads.

    Args:
        config: The backend configuration.

    Keyword Args:
        transport_class: A zero-argument callable returning a new
            :py:class:`~davldap.transport.DirectoryTransport`.

    """

    #: The LDAP protocol version we negotiate
    protocol_version: int = 3
    #: If False, empty passwords are rejected without contacting the server,
    #: since most servers treat a bind with an empty password as an anonymous
    #: bind and report success
    permit_empty_password: bool = False

    def __init__(
        self,
        config: LdapAuthConfig,
        transport_class: type[DirectoryTransport] = PythonLdapTransport,
    ) -> None:
        self.config = config
        self.transport_class = transport_class

    @classmethod
    def from_settings(cls, name: str = "default", **kwargs) -> "LdapBackend":
        """
        Build a backend from ``settings.DAV_LDAP_AUTH[name]``.

        Args:
            name: The key into ``settings.DAV_LDAP_AUTH``.
            **kwargs: Passed on to the constructor.

        """
        return cls(LdapAuthConfig.from_settings(name), **kwargs)

    def get_dn(self, username: str) -> str:
        """
        Return the DN we will bind as for ``username``.
        """
        return expand_dn_template(username, self.config.dn_template)

    def _bind(self, transport: DirectoryTransport, dn: str, password: str) -> bool:
        """
        Negotiate the protocol version and bind as ``dn`` on an open transport.

        Logs the error message and the directory's diagnostic if the bind
        fails with a directory error.
        """
        if not transport.negotiate_version(self.protocol_version):
            return False
        result = transport.bind(dn, password)
        if result.error:
            logger.error("auth.bind_error dn=%s error=%s", dn, result.message)
            logger.error("auth.bind_diagnostic dn=%s diagnostic=%s", dn, result.diagnostic)
        return result.success

    def authenticate(self, username: str, password: str) -> bool:
        """
        Try to authenticate a username/password against our LDAP server.

        If the password is empty, return False.
        If we can't connect, return False.
        If the bind is rejected or fails with an error, return False.
        Else, return True.

        Args:
            username: The username to authenticate.
            password: The password to authenticate with.

        Returns:
            True if authentication is successful, False otherwise.

        """
        if not self._password_allowed(username, password):
            return False
        transport = self.transport_class()
        if not transport.open(self.config.uri):
            return False
        try:
            return self._bind(transport, self.get_dn(username), password)
        finally:
            transport.close()

    def _password_allowed(self, username: str, password: str) -> bool:
        if password or self.permit_empty_password:
            return True
        logger.debug("auth.empty_password user=%s", username)
        return False

    def validate_user_pass(self, username: str, password: str) -> bool:
        return self.authenticate(username, password)

    def identify(self, username: str, password: str) -> DirectoryIdentity | None:
        """
        Authenticate and, if that works, read the user's display name and
        email address from their own entry.

        Args:
            username: The username to authenticate.
            password: The password to authenticate with.

        Returns:
            The user's identity, or None if authentication failed.

        """
        if not self._password_allowed(username, password):
            return None
        transport = self.transport_class()
        if not transport.open(self.config.uri):
            return None
        dn = self.get_dn(username)
        try:
            if not self._bind(transport, dn, password):
                return None
            attributes = [self.config.display_name_attribute, self.config.mail_attribute]
            entry = transport.read_entry(dn, attributes)
        finally:
            transport.close()
        if entry is None:
            logger.warning("auth.no_entry dn=%s", dn)
            entry = {}
        return DirectoryIdentity(
            username=username,
            dn=dn,
            display_name=self._first_value(entry, self.config.display_name_attribute),
            email=self._first_value(entry, self.config.mail_attribute),
        )

    @staticmethod
    def _first_value(entry: LDAPAttributes, attribute: str) -> str | None:
        """
        Return the first value of ``attribute`` in ``entry`` as a string.

        LDAP attribute names are case insensitive, so we match them that way.
        """
        attribute = attribute.lower()
        for name, values in entry.items():
            if name.lower() == attribute and values:
                value = values[0]
                return value.decode("utf-8", errors="replace") if isinstance(value, bytes) else str(value)
        return None
