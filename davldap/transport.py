"""
Directory transports.

A directory transport is the thing that actually talks to the LDAP server on
behalf of :py:class:`~davldap.backends.LdapBackend`.  It wraps one connection,
and reports failures as return values rather than exceptions, so that the
backend never has to catch anything.

:py:class:`PythonLdapTransport` is the real implementation, on top of
python-ldap.  Tests can substitute anything that implements
:py:class:`DirectoryTransport`.
"""

from contextlib import suppress
from dataclasses import dataclass
from typing import Protocol

from davldap import ldap

from .typing import LDAPAttributes


@dataclass(frozen=True)
class BindResult:
    """
    The outcome of a bind attempt.

    A rejected bind (bad credentials) has ``success=False`` and no
    ``message``.  A bind that failed because of a directory error also has
    ``message`` set, and ``diagnostic`` set to whatever the server said about
    it.
    """

    #: True if the server accepted the bind
    success: bool
    #: The error message, if the bind failed with an error
    message: str | None = None
    #: The directory's own diagnostic string for the error, if any
    diagnostic: str | None = None

    @property
    def error(self) -> bool:
        """True if the bind failed with a directory error."""
        return self.message is not None


class DirectoryTransport(Protocol):
    """
    The operations :py:class:`~davldap.backends.LdapBackend` needs from a
    directory connection.

    A transport instance is used for exactly one authentication attempt.
    """

    def open(self, uri: str) -> bool:
        """Open a connection to ``uri``.  Return False if that fails."""

    def negotiate_version(self, version: int) -> bool:
        """Set the LDAP protocol version.  Return False if that fails."""

    def bind(self, dn: str, password: str) -> BindResult:
        """Attempt a simple bind as ``dn``."""

    def read_entry(self, dn: str, attributes: list[str]) -> LDAPAttributes | None:
        """Read ``attributes`` from the entry at ``dn``, or None on failure."""

    def close(self) -> None:
        """Release the connection.  Safe to call more than once."""


def describe_error(exc: Exception) -> tuple[str, str | None]:
    """
    Pull the message and the server's diagnostic text out of an LDAP error.

    python-ldap puts a dict with ``desc`` and, when the server sent one,
    ``info`` in ``exc.args[0]``.

    Args:
        exc: The exception raised by python-ldap.

    Returns:
        A ``(message, diagnostic)`` tuple.

    """
    details = exc.args[0] if exc.args else None
    if isinstance(details, dict):
        message = details.get("desc") or type(exc).__name__
        return str(message), details.get("info")
    return str(exc) or type(exc).__name__, None


class PythonLdapTransport:
    """
    A :py:class:`DirectoryTransport` that uses python-ldap.
    """

    def __init__(self) -> None:
        self.connection: ldap.ldapobject.LDAPObject | None = None  # type: ignore[name-defined]

    def open(self, uri: str) -> bool:
        try:
            self.connection = ldap.initialize(uri)
        except ldap.LDAPError:  # type: ignore[attr-defined]
            return False
        return True

    def negotiate_version(self, version: int) -> bool:
        if self.connection is None:
            return False
        try:
            self.connection.set_option(ldap.OPT_PROTOCOL_VERSION, version)  # type: ignore[attr-defined]
        except (ldap.LDAPError, ValueError):  # type: ignore[attr-defined]
            return False
        return True

    def bind(self, dn: str, password: str) -> BindResult:
        if self.connection is None:
            return BindResult(success=False, message="no connection")
        try:
            self.connection.simple_bind_s(dn, password)
        except ldap.INVALID_CREDENTIALS:  # type: ignore[attr-defined]
            return BindResult(success=False)
        except ldap.LDAPError as e:  # type: ignore[attr-defined]
            message, diagnostic = describe_error(e)
            if not diagnostic:
                diagnostic = self._diagnostic_message()
            return BindResult(success=False, message=message, diagnostic=diagnostic)
        except (ValueError, TypeError) as e:
            # python-ldap refuses embedded NULs and unencodable strings before
            # anything is sent to the server
            return BindResult(success=False, message=str(e) or type(e).__name__)
        return BindResult(success=True)

    def read_entry(self, dn: str, attributes: list[str]) -> LDAPAttributes | None:
        if self.connection is None:
            return None
        try:
            results = self.connection.search_s(
                dn,
                ldap.SCOPE_BASE,  # type: ignore[attr-defined]
                "(objectClass=*)",
                attributes,
            )
        except (ldap.LDAPError, ValueError, TypeError):  # type: ignore[attr-defined]
            return None
        if not results:
            return None
        return results[0][1]

    def close(self) -> None:
        if self.connection is None:
            return
        with suppress(ldap.LDAPError):  # type: ignore[attr-defined]
            self.connection.unbind_s()
        self.connection = None

    def _diagnostic_message(self) -> str | None:
        """
        Ask the connection for the last diagnostic message the server sent.
        """
        try:
            return self.connection.get_option(ldap.OPT_DIAGNOSTIC_MESSAGE)  # type: ignore[union-attr, attr-defined]
        except (ldap.LDAPError, ValueError, KeyError):  # type: ignore[attr-defined]
            return None
