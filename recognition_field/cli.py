"""CLI entry point for the recognition field."""

import argparse
import logging
import sys
from pathlib import Path

from recognition_field.config import load_config
from recognition_field.errors import InputError, StorageError, ValidationError
from recognition_field.field import RecognitionField
from recognition_field.interaction import related_moments
from recognition_field.store import GraphStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Recognition Field")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    sub = parser.add_subparsers(dest="command")

    # show command
    show_parser = sub.add_parser("show", help="List moments and their connections")
    show_parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    show_parser.add_argument("--node", type=int, default=None, help="Show one moment in full")

    # add command
    add_parser = sub.add_parser("add", help="Add a new recognition moment")
    add_parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    add_parser.add_argument("--title", required=True)
    add_parser.add_argument("--content", required=True)
    add_parser.add_argument("--target", type=int, required=True, help="Moment id to connect to")
    add_parser.add_argument(
        "--type", dest="kind", default="resonance",
        choices=["resonance", "tension", "evolution"],
        help="Connection type",
    )

    # reset command
    reset_parser = sub.add_parser("reset", help="Restore the seed moments")
    reset_parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    # simulate command
    sim_parser = sub.add_parser("simulate", help="Run the layout and print positions")
    sim_parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sim_parser.add_argument("--frames", type=int, default=300, help="Frames to run")

    # export command
    export_parser = sub.add_parser("export", help="Write the laid-out field as an HTML page")
    export_parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    export_parser.add_argument("--frames", type=int, default=300, help="Frames to run first")
    export_parser.add_argument("--output", type=Path, default=None, help="Output HTML path")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    config = load_config(args.config)
    store = GraphStore(config)
    try:
        store.init_db()
    except StorageError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        field = RecognitionField(config, store)
        field.load()
        if field.last_error:
            print(f"Warning: {field.last_error}", file=sys.stderr)

        if args.command == "show":
            nodes = field.engine.nodes
            if args.node is not None:
                if not field.engine.has_node(args.node):
                    print(f"Moment {args.node} not found")
                    return 1
                node = field.engine.node(args.node)
                print(node.title)
                print()
                print(node.content)
                related = related_moments(node.id, nodes, field.engine.links)
                if related:
                    print(f"\nConnections ({len(related)}):")
                    for r in related:
                        arrow = "-->" if r.direction == "outgoing" else "<--"
                        print(f"  {arrow} [{r.kind.value}] {r.id}: {r.title}")
                return 0

            print(f"Moments ({len(nodes)}):")
            for n in nodes:
                print(f"  {n.id}: {n.title}")
            print(f"\nLinks ({len(field.engine.links)}):")
            for link in field.engine.links:
                print(f"  {link.source} --[{link.kind.value}]--> {link.target}")
            for w in field.engine.warnings:
                print(f"  ! {w}")

        elif args.command == "add":
            node = field.add_moment(args.title, args.content, args.target, args.kind)
            print(f"Added moment {node.id}: {node.title} --[{args.kind}]--> {args.target}")

        elif args.command == "reset":
            graph = field.reset()
            print(f"Reset to {len(graph.nodes)} moments, {len(graph.links)} links")

        elif args.command == "simulate":
            steps = field.run_frames(args.frames)
            print(f"{steps} steps, alpha={field.engine.alpha:.4f}")
            for n in field.engine.nodes:
                print(f"  {n.id:>3} {n.x:>9.2f} {n.y:>9.2f}  {n.title}")

        elif args.command == "export":
            from recognition_field.output.field_page import generate_field_page

            field.run_frames(args.frames)
            path = generate_field_page(field.interaction, config, output_path=args.output)
            print(f"Output: {path}")

        else:
            parser.print_help()
    except InputError as e:
        for name, message in e.errors.items():
            print(f"  {name}: {message}", file=sys.stderr)
        return 2
    except (ValidationError, StorageError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        store.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
