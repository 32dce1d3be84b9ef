"""gettext domain for the user-facing strings of the command line."""

import gettext
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

DOMAIN = "charme_annotator"
LOCALE_DIR = Path(__file__).parent.parent / "locale"

gettext.bindtextdomain(DOMAIN, localedir=str(LOCALE_DIR))
gettext.textdomain(DOMAIN)

if gettext.find(DOMAIN, localedir=str(LOCALE_DIR)) is None:
    logger.debug(
        "No %s catalog for the current locale under %s, using untranslated messages",
        DOMAIN,
        LOCALE_DIR,
    )
