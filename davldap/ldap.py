# This file is here so that we can patch the ldap module in our tests.
# python-ldap-faker patches ``<module>.ldap.initialize`` for the modules listed
# in ``ldap_modules``, so everything in davldap talks to python-ldap through
# this module.
import ldap
from ldap import *  # noqa: F403

__version__ = ldap.__version__
