import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

from infimum import InfimumError
from infimum.accumulator import Accumulator
from infimum.config import SystemConfig, load_config, save_config
from infimum.poll import PublicKey, registration_leaf
from infimum.utils import setup_logging
from infimum.zk import PoseidonHasher, to_field_bytes

logger = logging.getLogger(__name__)


def parse_field(value: str) -> bytes:
    """Decimal or 0x-prefixed hex field element"""
    number = int(value, 16) if value.startswith("0x") else int(value)
    return to_field_bytes(number)


def compute_root(leaves: List[str], depth: int, hasher: PoseidonHasher) -> str:
    root = Accumulator.compute_root(
        [parse_field(leaf) for leaf in leaves], depth, hasher)
    return "0x" + root.hex()


def main():
    parser = argparse.ArgumentParser(
        description='Poll engine tooling for coordinators and provers')
    parser.add_argument('--config', type=str,
                        default='config.yaml', help='Config file path')
    subparsers = parser.add_subparsers(dest='command', required=True)

    root_parser = subparsers.add_parser(
        'root', help='Compute the accumulator root of ordered leaves')
    root_parser.add_argument('--depth', type=int, required=True)
    root_parser.add_argument('leaves', nargs='*',
                             help='Leaves as decimal or 0x-hex field elements')

    leaf_parser = subparsers.add_parser(
        'leaf', help='Compute a registration leaf')
    leaf_parser.add_argument('--x', required=True)
    leaf_parser.add_argument('--y', required=True)
    leaf_parser.add_argument('--block', type=int, required=True)

    config_parser = subparsers.add_parser(
        'config', help='Write the default configuration')
    config_parser.add_argument('--output', type=str, default='config.yaml')

    args = parser.parse_args()

    if args.command == 'config':
        save_config(SystemConfig(), Path(args.output))
        print(f"Configuration written to {args.output}")
        sys.exit(0)

    config = load_config(Path(args.config))
    setup_logging(config.log_level, log_dir=config.log_dir)
    hasher = PoseidonHasher.from_constants_file(
        config.hash_config.constants_file)

    try:
        if args.command == 'root':
            print(json.dumps({
                'depth': args.depth,
                'leaf_count': len(args.leaves),
                'root': compute_root(args.leaves, args.depth, hasher)
            }, indent=2))
        elif args.command == 'leaf':
            public_key = PublicKey(parse_field(args.x), parse_field(args.y))
            leaf = registration_leaf(hasher, public_key, args.block)
            print("0x" + leaf.hex())
    except (ValueError, InfimumError) as e:
        logger.error(f"{args.command} failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
