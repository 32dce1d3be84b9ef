from gettext import gettext as _

COMMAND_DESCRIPTION = _("Forget the cached CHARMe token")


def command(subparser):
    from charme_annotator.cli.common import node_flags

    node_flags(subparser)

    def handle(args):
        from charme_annotator.cli.common import build_session, config_from_args

        _client, session = build_session(config_from_args(args))
        session.logout()
        print(_("Logged out"))

    return handle
