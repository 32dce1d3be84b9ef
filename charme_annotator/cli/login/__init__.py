import asyncio
import logging
from gettext import gettext as _

logger = logging.getLogger(__name__)

COMMAND_DESCRIPTION = _("Log in to a CHARMe node and cache the token")


def command(subparser):
    from charme_annotator.cli.common import node_flags

    node_flags(subparser)
    subparser.add_argument(
        "--redirect-url",
        dest="redirect_url",
        help=_("URL the provider redirected to, if you already have it"),
    )
    subparser.add_argument(
        "--no-browser",
        dest="no_browser",
        action="store_true",
        help=_("Print the authorization URL instead of opening it"),
    )

    def handle(args):
        return run(args)

    return handle


def run(args, transport=None, token_store=None, prompt=input):
    from charme_annotator.cli.common import build_session, config_from_args
    from charme_annotator.core.annotation import AuthenticationError, EventType

    cfg = config_from_args(args)
    open_url = print if args.no_browser else None
    _client, session = build_session(
        cfg, transport=transport, token_store=token_store, open_url=open_url
    )

    redirect_url = args.redirect_url
    if not redirect_url:
        session.login()
        redirect_url = prompt(_("Paste the URL you were redirected to: ")).strip()

    try:
        session.handle_redirect(redirect_url)
    except AuthenticationError as e:
        logger.error(_("Login failed: {e}").format(e=e))
        return 1

    session.events.on(
        EventType.LOGIN,
        lambda event: print(
            _("Logged in as user {username} ({name})").format(
                username=event.data["user"].username, name=event.data["user"].full_name
            )
        ),
    )
    asyncio.run(session.check_cached_token())
    return 0 if session.is_logged_in else 1
