# flake8: noqa E501

import asyncio
import logging
from gettext import gettext as _

logger = logging.getLogger(__name__)

COMMAND_DESCRIPTION = _("Submit an annotation on a dataset region")


def command(subparser):
    from charme_annotator.cli.common import node_flags, shape_flags

    node_flags(subparser)
    shape_flags(subparser)
    subparser.add_argument("--dataset", required=True, metavar="URI", help=_("Dataset URI"))
    subparser.add_argument("--variable", required=True, help=_("Internal variable name"))
    subparser.add_argument("-m", "--comment", required=True, help=_("Comment text"))
    subparser.add_argument(
        "-n",
        "--dry-run",
        dest="dry_run",
        action="store_true",
        help=_("Print the Turtle document instead of sending it"),
    )

    def handle(args):
        return run(args)

    return handle


async def submit(args, location, client, session) -> int:
    from charme_annotator.core.annotation import AnnotationDraft, CharmeError
    from charme_annotator.core.annotation.document import build_document

    await session.check_cached_token()
    token = session.require_token()
    draft = AnnotationDraft(
        dataset_uri=args.dataset,
        variable_name=args.variable,
        location=location,
        comment=args.comment,
        author=session.user,
    )
    try:
        await client.insert_annotation(build_document(draft).serialize(), token)
    except CharmeError as e:
        logger.error(_("Problem creating annotation: {e}").format(e=e))
        return 1
    print(_("Annotation created"))
    return 0


def run(args, transport=None, token_store=None):
    from charme_annotator.cli.common import build_session, config_from_args, shape_from_args
    from charme_annotator.core.annotation import AnnotationDraft, AuthenticationError, encode
    from charme_annotator.core.annotation.document import build_document

    try:
        location = encode(shape_from_args(args))
    except ValueError as e:
        logger.error(_("Cannot encode shape: {e}").format(e=e))
        return 1

    if args.dry_run:
        draft = AnnotationDraft(
            dataset_uri=args.dataset,
            variable_name=args.variable,
            location=location,
            comment=args.comment,
        )
        print(build_document(draft).serialize())
        return 0

    client, session = build_session(
        config_from_args(args), transport=transport, token_store=token_store
    )
    try:
        return asyncio.run(submit(args, location, client, session))
    except AuthenticationError as e:
        logger.error(_("{e}. Run `charme_annotator login` first.").format(e=e))
        return 1
