# flake8: noqa E501

import asyncio
import json
import logging
from gettext import gettext as _

logger = logging.getLogger(__name__)

COMMAND_DESCRIPTION = _("Build, and optionally run, an annotation query")


def command(subparser):
    from charme_annotator.cli.common import node_flags

    node_flags(subparser)
    target = subparser.add_mutually_exclusive_group(required=True)
    target.add_argument(
        "--dataset",
        nargs=2,
        metavar=("URI", "VARIABLE"),
        help=_("Annotations of one dataset variable"),
    )
    target.add_argument(
        "--bbox",
        nargs=4,
        type=float,
        metavar=("MINX", "MINY", "MAXX", "MAXY"),
        help=_("Annotations intersecting a lon/lat rectangle"),
    )
    subparser.add_argument("--limit", type=int, default=100, help=_("Result cap for --bbox"))
    subparser.add_argument(
        "-x",
        "--execute",
        action="store_true",
        help=_("Send the query to the node and print the results"),
    )
    subparser.add_argument(
        "--json", dest="as_json", action="store_true", help=_("Print raw GeoJSON")
    )

    def handle(args):
        return run(args)

    return handle


def build_query_text(args) -> str:
    from charme_annotator.core.annotation.query import (
        build_dataset_query,
        build_viewport_query,
    )
    from charme_annotator.core.annotation.state import Bounds, LngLat

    if args.dataset:
        uri, variable = args.dataset
        return build_dataset_query(uri, variable)
    minx, miny, maxx, maxy = args.bbox
    return build_viewport_query(
        Bounds(LngLat(lng=minx, lat=miny), LngLat(lng=maxx, lat=maxy)), args.limit
    )


def run(args, transport=None):
    from charme_annotator.cli.common import build_session, config_from_args
    from charme_annotator.core.annotation import AnnotationRecord, CharmeError
    from charme_annotator.core.annotation.utils import author_display_name

    query_text = build_query_text(args)
    if not args.execute:
        print(query_text)
        return 0

    cfg = config_from_args(args)
    client, _session = build_session(cfg, transport=transport)
    try:
        collection = asyncio.run(client.query(query_text))
    except CharmeError as e:
        logger.error(_("Query failed: {e}").format(e=e))
        return 1

    if args.as_json:
        print(json.dumps(collection, indent=2))
        return 0
    for feature in collection.get("features") or []:
        record = AnnotationRecord.from_feature(feature)
        print("\t".join([record.spatial_text or "", record.text or "", author_display_name(record)]))
    return 0
