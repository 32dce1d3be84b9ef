import logging
from gettext import gettext as _

logger = logging.getLogger(__name__)

COMMAND_DESCRIPTION = _("Print the WKT for a point or polygon")


def command(subparser):
    from charme_annotator.cli.common import shape_flags

    shape_flags(subparser)

    def handle(args):
        from charme_annotator.cli.common import shape_from_args
        from charme_annotator.core.annotation import encode

        try:
            wkt = encode(shape_from_args(args))
        except ValueError as e:
            logger.error(_("Cannot encode shape: {e}").format(e=e))
            return 1
        print(wkt)
        return 0

    return handle
