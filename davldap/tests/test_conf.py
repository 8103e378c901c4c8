"""
Tests for LdapAuthConfig.
"""

import dataclasses
import unittest

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.test import override_settings

from davldap.conf import LdapAuthConfig

if not settings.configured:
    settings.configure(
        DAV_LDAP_AUTH={
            "default": {
                "url": "ldap://localhost:389",
                "dn_template": "mail=%u,ou=people,dc=example,dc=com",
            }
        }
    )


class TestLdapAuthConfig(unittest.TestCase):
    """Test configuration construction and validation."""

    def test_defaults(self):
        config = LdapAuthConfig("ldaps://ldap.example.org")
        self.assertEqual(config.uri, "ldaps://ldap.example.org")
        self.assertEqual(config.dn_template, "mail=%u")
        self.assertEqual(config.display_name_attribute, "cn")
        self.assertEqual(config.mail_attribute, "mail")

    def test_is_immutable(self):
        config = LdapAuthConfig("ldap://localhost")
        with self.assertRaises(dataclasses.FrozenInstanceError):
            config.dn_template = "uid=%U"  # type: ignore[misc]

    def test_accepts_ldap_schemes(self):
        for uri in ("ldap://localhost", "ldaps://ldap.example.org:636", "ldapi://%2Fvar%2Frun%2Fslapd.sock"):
            with self.subTest(uri=uri):
                self.assertEqual(LdapAuthConfig(uri).uri, uri)

    def test_rejects_non_ldap_uri(self):
        for uri in ("http://ldap.example.org", "ldap.example.org", ""):
            with self.subTest(uri=uri), self.assertRaises(ImproperlyConfigured):
                LdapAuthConfig(uri)

    def test_rejects_empty_values(self):
        for field_name in ("dn_template", "display_name_attribute", "mail_attribute"):
            with self.subTest(field=field_name), self.assertRaises(ImproperlyConfigured):
                LdapAuthConfig("ldap://localhost", **{field_name: ""})

    @override_settings(
        DAV_LDAP_AUTH={
            "default": {
                "url": "ldap://localhost:389",
                "dn_template": "mail=%u,ou=people,dc=example,dc=com",
            }
        }
    )
    def test_from_settings(self):
        config = LdapAuthConfig.from_settings()
        self.assertEqual(config.uri, "ldap://localhost:389")
        self.assertEqual(config.dn_template, "mail=%u,ou=people,dc=example,dc=com")
        self.assertEqual(config.display_name_attribute, "cn")

    def test_from_settings_named_server(self):
        servers = {
            "dav": {
                "url": "ldaps://ldap.example.org",
                "dn_template": "uid=%U,dc=%2,dc=%1",
                "display_name_attribute": "displayName",
                "mail_attribute": "mailLocalAddress",
            }
        }
        with override_settings(DAV_LDAP_AUTH=servers):
            config = LdapAuthConfig.from_settings("dav")
        self.assertEqual(
            config,
            LdapAuthConfig(
                "ldaps://ldap.example.org",
                dn_template="uid=%U,dc=%2,dc=%1",
                display_name_attribute="displayName",
                mail_attribute="mailLocalAddress",
            ),
        )

    @override_settings(DAV_LDAP_AUTH={"default": {"url": "ldap://localhost"}})
    def test_from_settings_unknown_server(self):
        with self.assertRaises(ImproperlyConfigured):
            LdapAuthConfig.from_settings("nonexistent")

    def test_from_settings_missing_setting(self):
        with override_settings(DAV_LDAP_AUTH=None), self.assertRaises(ImproperlyConfigured):
            LdapAuthConfig.from_settings()

    def test_from_settings_missing_url(self):
        with override_settings(DAV_LDAP_AUTH={"default": {"dn_template": "uid=%U"}}):
            with self.assertRaises(ImproperlyConfigured):
                LdapAuthConfig.from_settings()
