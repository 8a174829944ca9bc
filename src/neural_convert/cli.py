"""
Convert a sentiment model or a DV parser between its native form ("old" stage input) and the
portable form ("new" stage input).

Examples:

    neural-convert --stage old --model sentiment -i sentiment.pt -o sentiment.portable
    neural-convert --stage new --model sentiment -i sentiment.portable -o sentiment.pt
"""

import logging
from argparse import ArgumentParser, Namespace
from typing import List, Optional

from .convert import ConversionConfig, ModelType, Stage, convert, parse_choice
from .exceptions import CLIError, ConfigurationError
from .utils import prepare_cli_environment
from .version import VERSION

log = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> Namespace:
    parser = ArgumentParser(prog="neural-convert", description=__doc__)
    parser.add_argument(
        "-s",
        "--stage",
        type=str,
        help="Either 'old' (native to portable) or 'new' (portable to native).",
    )
    parser.add_argument(
        "-m",
        "--model",
        type=str,
        help="The kind of model being converted, either 'sentiment' or 'dvparser'.",
    )
    parser.add_argument(
        "-i",
        "--input",
        type=str,
        help="Local path or URL of the model to convert.",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        help="Local path where the converted model should be saved.",
    )
    parser.add_argument(
        "--save-overwrite",
        action="store_true",
        default=None,
        help="If set, an existing file at the output path is overwritten.",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=str,
        help="A YAML or JSON file with the conversion config. "
        "Command line options take precedence.",
    )
    parser.add_argument("--version", action="version", version=VERSION)
    parser.add_argument(
        "overrides",
        nargs="*",
        help="Config overrides in dot notation, e.g. 'save_overwrite=true'.",
    )
    return parser.parse_args(argv)


def build_config(args: Namespace) -> ConversionConfig:
    config = ConversionConfig.from_file(args.config) if args.config else ConversionConfig()

    changes = {}
    if args.stage is not None:
        changes["stage"] = parse_choice(Stage, args.stage, "stage")
    if args.model is not None:
        changes["model"] = parse_choice(ModelType, args.model, "model")
    for name in ("input", "output", "save_overwrite"):
        if (value := getattr(args, name)) is not None:
            changes[name] = value
    config = config.replace(**changes)

    if args.overrides:
        return config.merge(args.overrides)
    config.validate()
    return config


def run(argv: Optional[List[str]] = None):
    config = build_config(parse_args(argv))
    log.info(f"Conversion config: {config.as_config_dict()}")
    return convert(config)


def main():
    prepare_cli_environment()
    try:
        run()
    except ConfigurationError as e:
        raise CLIError(f"{e} (see 'neural-convert --help')") from e


if __name__ == "__main__":
    main()
