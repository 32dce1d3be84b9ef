import gettext

from . import i18n


def test_domain_is_active():
    assert gettext.textdomain() == i18n.DOMAIN
