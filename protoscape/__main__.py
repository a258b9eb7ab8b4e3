import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from protoscape import (
    DatasetError,
    DimensionMismatch,
    InteractionAdapter,
    LayoutOptions,
    Session,
    SessionOptions,
    UnknownPrototypeError,
    get_layout_options,
    render_frame,
)
from protoscape.render import format_weight

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _layout_options(args: argparse.Namespace) -> LayoutOptions:
    options = get_layout_options()
    options.width = args.width
    options.height = args.height
    options.random_seed = args.seed
    options.seed_strategy = args.seed_strategy
    return options


def _apply_query(adapter: InteractionAdapter, query: str) -> None:
    if query == "mean":
        return
    if query in ("zeros", "ones"):
        adapter.key_press("0" if query == "zeros" else "1")
        return
    adapter.double_click(query)


def _print_ranking(session: Session, limit: int) -> List[str]:
    ranked = sorted(session.query_edges, key=lambda edge: edge.weight)
    lines = []
    for pos, edge in enumerate(ranked[:limit], start=1):
        proto = session.prototypes.get(edge.target)
        lines.append(f"{pos:>3}. {proto.id} ({proto.display_name}) distance={format_weight(edge.weight)}")
    print("\n".join(lines))
    return lines


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Lay out prototypes and a query point by feature similarity")
    parser.add_argument("path", help="CSV table of prototypes (4 identity columns, then features)")
    parser.add_argument(
        "--groups",
        help="JSON object mapping feature columns to control groups",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=123,
        help="Random seed for layout jitter (default: 123)",
    )
    parser.add_argument(
        "--seed-strategy",
        choices=["mds", "phyllotaxis"],
        default="mds",
        help="Initial placement strategy (default: mds)",
    )
    parser.add_argument(
        "--query",
        default="mean",
        help="Query point: 'mean', 'zeros', 'ones' or a prototype id (default: mean)",
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=None,
        help="Stop the layout after this many steps even if not settled",
    )
    parser.add_argument("--width", type=float, default=960.0, help="Canvas width (default: 960)")
    parser.add_argument("--height", type=float, default=720.0, help="Canvas height (default: 720)")
    parser.add_argument("--top", type=int, default=10, help="Number of closest prototypes to print")
    parser.add_argument(
        "--output",
        help="Write the final render frame as JSON to the given path",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    options = SessionOptions(layout=_layout_options(args))
    try:
        session = Session.from_files(args.path, args.groups, options)
        adapter = InteractionAdapter(session)
        _apply_query(adapter, args.query)
    except (DatasetError, DimensionMismatch, UnknownPrototypeError) as exc:
        logger.error("Cannot build session: %s", exc)
        raise SystemExit(1) from exc

    snapshot = session.settle(args.max_steps)
    logger.info("Layout finished at step %d (state=%s alpha=%.4f)", snapshot.step, snapshot.state.value, snapshot.alpha)

    _print_ranking(session, args.top)

    if args.output:
        out_path = Path(args.output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        frame = render_frame(session, snapshot)
        out_path.write_text(json.dumps(frame.to_dict(), indent=2), encoding="utf-8")
        logger.info("Wrote render frame to %s", out_path)


if __name__ == "__main__":
    main(sys.argv[1:])
