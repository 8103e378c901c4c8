"""
Bind DN construction.

This module turns a raw username into the DN we bind as, by expanding the
placeholders in a DN template.
"""

#: The highest numbered domain label placeholder, ``%9``.
MAX_DOMAIN_LABELS = 9


def expand_dn_template(username: str, template: str) -> str:
    """
    Expand the placeholders in ``template`` using parts of ``username``.

    Placeholders are replaced in this order, each pass replacing every
    occurrence:

    * ``%u``: the full username
    * ``%U``: the user part when the username is an email address, otherwise
      the full username
    * ``%d``: the domain part when the username is an email address
    * ``%1`` - ``%9``: the labels of the domain part in reverse order, so for
      ``mail.example.org``, ``%1`` is ``org``, ``%2`` is ``example`` and
      ``%3`` is ``mail``

    When the username has no ``@``, ``%d`` and ``%1`` - ``%9`` are left in the
    DN as they are.

    Example:
        >>> expand_dn_template("alice@mail.example.org", "uid=%U,dc=%1,dc=%2,dc=%3")
        'uid=alice,dc=org,dc=example,dc=mail'

    Args:
        username: The username as the client supplied it.
        template: The DN template.

    Returns:
        The DN to bind as.

    """
    user, at, domain = username.partition("@")
    dn = template.replace("%u", username)
    dn = dn.replace("%U", user)
    if not at:
        return dn
    dn = dn.replace("%d", domain)
    labels = list(reversed(domain.split(".")))[:MAX_DOMAIN_LABELS]
    for index, label in enumerate(labels, start=1):
        dn = dn.replace(f"%{index}", label)
    return dn
