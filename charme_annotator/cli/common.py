"""Flags and helpers shared by the subcommands."""

from gettext import gettext as _

from charme_annotator.core.annotation import CharmeNodeClient, Point, Polygon, SessionManager
from charme_annotator.utils.config import load_config


def node_flags(parser):
    parser.add_argument(
        "-u", "--node-url", dest="node_url", help=_("CHARMe node endpoint URL")
    )
    parser.add_argument(
        "--client-id", dest="client_id", help=_("OAuth client id registered on the node")
    )
    parser.add_argument(
        "--redirect-uri",
        dest="redirect_uri",
        help=_("Redirect URI registered for the client"),
    )
    parser.add_argument(
        "--token-file", dest="token_path", help=_("Where the login token is cached")
    )


def shape_flags(parser, required=True):
    group = parser.add_mutually_exclusive_group(required=required)
    group.add_argument(
        "--point",
        nargs=2,
        type=float,
        metavar=("LNG", "LAT"),
        help=_("A single point"),
    )
    group.add_argument(
        "--polygon",
        nargs="+",
        metavar="LNG,LAT",
        help=_("Polygon vertices in drawing order"),
    )


def shape_from_args(args):
    if args.point is not None:
        return Point(lng=args.point[0], lat=args.point[1])
    pairs = []
    for vertex in args.polygon:
        lng, sep, lat = vertex.partition(",")
        if not sep:
            raise ValueError(_("Polygon vertices look like LNG,LAT, got {v}").format(v=vertex))
        pairs.append((float(lng), float(lat)))
    return Polygon.from_pairs(pairs)


def config_from_args(args):
    return load_config(
        {
            "node": {
                "url": getattr(args, "node_url", None),
                "client_id": getattr(args, "client_id", None),
                "redirect_uri": getattr(args, "redirect_uri", None),
            },
            "token": {"path": getattr(args, "token_path", None)},
        }
    )


def build_session(cfg, transport=None, token_store=None, open_url=None):
    """Client and session manager for a command."""
    if transport is None:
        from charme_annotator.interfaces.http import RequestsTransport

        transport = RequestsTransport()
    if token_store is None:
        from charme_annotator.interfaces.token_store import FileTokenStore

        token_store = FileTokenStore(cfg.token.path)
    client = CharmeNodeClient(cfg.node.url, transport)
    session = SessionManager(
        client,
        token_store,
        client_id=cfg.node.client_id,
        redirect_uri=cfg.node.redirect_uri,
        open_url=open_url,
    )
    return client, session
