"""CLI for inspecting and editing timeline item links in a local item store file"""

import argparse
import json
import sys

from loguru import logger

from linkgraph.config import settings
from linkgraph.item_store.local import LocalItemStore
from linkgraph.links.errors import CyclicDependencyError
from linkgraph.links.manager import LinkGraphManager


def main(args: argparse.Namespace) -> int:
    logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

    item_store = LocalItemStore(filepath=args.store)
    manager = LinkGraphManager(item_store, enforce_acyclic=not args.permissive)

    if args.command == "stats":
        print(manager.get_stats(args.feature).model_dump_json(indent=2))
    elif args.command == "links":
        print(manager.get_all_links(args.feature, args.item).model_dump_json(indent=2))
    elif args.command == "deps":
        dependencies = manager.get_dependencies(args.feature, args.item)
        dependents = manager.get_dependents(args.feature, args.item)
        print(
            json.dumps(
                {
                    "dependencies": [item.id for item in dependencies],
                    "dependents": [item.id for item in dependents],
                },
                indent=2,
            )
        )
    elif args.command == "check":
        print(
            json.dumps(
                {
                    "exists": manager.link_exists(args.feature, args.source, args.target),
                    "would_create_circular": manager.would_create_circular(
                        args.feature, args.source, args.target
                    ),
                },
                indent=2,
            )
        )
    elif args.command == "audit":
        problems = manager.find_inconsistencies(args.feature)
        for problem in problems:
            print(f"{problem.kind}: {problem.source_id} -> {problem.target_id} ({problem.detail})")
        cycles = manager.find_cycles(args.feature)
        for cycle in cycles:
            print(f"cycle: {' -> '.join(cycle + cycle[:1])}")
        return 1 if problems or cycles else 0
    elif args.command == "link":
        try:
            created = manager.create_link(args.feature, args.source, args.target, args.type)
        except CyclicDependencyError as e:
            logger.error(str(e))
            return 1
        if not created:
            return 1
        item_store.save()
    elif args.command == "unlink":
        if not manager.delete_link(args.feature, args.source, args.target):
            return 1
        item_store.save()

    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--store",
        type=str,
        required=False,
        help="Local item store file",
        default=settings.item_store_path,
    )
    parser.add_argument(
        "--permissive",
        action="store_true",
        help="Do not refuse circular dependencies when linking",
        default=not settings.enforce_acyclic,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    stats_parser = subparsers.add_parser("stats", help="Link counts for a feature")
    stats_parser.add_argument("feature")

    audit_parser = subparsers.add_parser(
        "audit", help="Report unpaired or duplicate records and dependency cycles"
    )
    audit_parser.add_argument("feature")

    for name, help_text in [
        ("links", "Incoming and outgoing links of an item"),
        ("deps", "Dependencies and dependents of an item"),
    ]:
        item_parser = subparsers.add_parser(name, help=help_text)
        item_parser.add_argument("feature")
        item_parser.add_argument("item")

    for name, help_text in [
        ("check", "Check whether a link exists or would close a cycle"),
        ("link", "Create a link"),
        ("unlink", "Delete a link"),
    ]:
        pair_parser = subparsers.add_parser(name, help=help_text)
        pair_parser.add_argument("feature")
        pair_parser.add_argument("source")
        pair_parser.add_argument("target")
        if name == "link":
            pair_parser.add_argument(
                "--type", choices=["dependency", "complements"], default="dependency"
            )

    sys.exit(main(parser.parse_args()))
