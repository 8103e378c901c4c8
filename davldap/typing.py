"""
LDAP type definitions.

This module provides type aliases for the LDAP data structures that the
directory transport hands back, using Python 3.10+ type hinting conventions.
"""

LDAPAttributes = dict[str, list[bytes]]
LDAPData = tuple[str, LDAPAttributes]
