#!/usr/bin/env python3
"""
Impersonate someone from a chat log.

Trains a Markov chain generator on the messages of one author and prints
random sentences in their style, one per line:

    impersonate ~/.weechat/logs/irc.libera.#python.weechatlog -a alice -o 5
"""

import argparse
import sys

from impersonate.models.errors import ChainError
from impersonate.models.markov_chain import (
    ChainParameters,
    LearningParameters,
    MarkovChainGenerator,
)
from impersonate.trainers.csv_column import CsvColumnTrainer
from impersonate.trainers.irssi import IrssiLogTrainer
from impersonate.trainers.weechat import WeechatLogTrainer
from impersonate.utils.config import load_config
from impersonate.utils.loggers.json_logger import get_logger, log_json
from impersonate.utils.system_monitoring import ResourceMonitor

DEFAULTS = {
    "author": "",
    "learning_size": 2,
    "output_strings": 1,
    "output_size": None,
    "format": "weechat",
    "weighted": False,
    "log_file": None,
    "log_level": "WARNING",
}

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]

TRAINERS = {
    "weechat": lambda author, content: WeechatLogTrainer(author, content),
    "irssi": lambda author, content: IrssiLogTrainer(author, content),
    "csv": lambda author, content: CsvColumnTrainer(content),
}


def build_parser():
    parser = argparse.ArgumentParser(
        prog="impersonate",
        description="Generate random sentences mimicking an author of a chat log")
    parser.add_argument("path", help="Path to the log file to learn from")
    parser.add_argument("-a", "--author",
                        help="Name of the author to mimic (default: everyone)")
    parser.add_argument("-l", "--learning-size", type=int,
                        help="Number of words forming a wording while learning (default: 2)")
    parser.add_argument("-o", "--output-strings", type=int,
                        help="Number of random strings to generate (default: 1)")
    parser.add_argument("-s", "--output-size", type=int,
                        help="Maximum number of wordings added to a random string (default: unbounded)")
    parser.add_argument("-f", "--format", choices=sorted(TRAINERS),
                        help="Format of the log file (default: weechat)")
    parser.add_argument("--weighted", action=argparse.BooleanOptionalAction, default=None,
                        help="Pick next wordings proportionally to their occurrences")
    parser.add_argument("--config", help="YAML file holding default options")
    parser.add_argument("--env", help="Environment used to find a configuration file")
    parser.add_argument("--log-file", help="File receiving every log record")
    parser.add_argument("--log-level",
                        choices=LOG_LEVELS,
                        help="Minimum level of console logs (default: WARNING)")
    return parser


def resolve_options(args, config):
    """
    Merge command-line arguments over configuration over defaults.

    Args:
        args (argparse.Namespace): Parsed command-line arguments
        config (dict): Normalized configuration

    Returns:
        dict: Resolved options
    """
    options = dict(DEFAULTS)
    options.update(config)
    for key in DEFAULTS:
        value = getattr(args, key, None)
        if value is not None:
            options[key] = value
    return options


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    # console logging until the configuration tells where records go
    logger = get_logger("impersonate", console_level=args.log_level or DEFAULTS["log_level"])

    try:
        config = load_config(args.config, environment=args.env)
    except (OSError, ValueError) as e:
        parser.error(str(e))

    options = resolve_options(args, config)
    if options["format"] not in TRAINERS:
        parser.error(f"unknown log format: {options['format']}")
    if options["output_strings"] < 0:
        parser.error("number of output strings cannot be negative")
    if options["log_level"].upper() not in LOG_LEVELS:
        parser.error(f"unknown log level: {options['log_level']}")

    try:
        learn_params = LearningParameters(wording_size=options["learning_size"])
        chain_params = ChainParameters(
            max_state_traversal=options["output_size"],
            weighted=options["weighted"])
    except ValueError as e:
        parser.error(str(e))

    logger = get_logger("impersonate", log_file=options["log_file"],
                        console_level=options["log_level"].upper())
    logger.info("Configuration resolved", extra={
        "metrics": {
            "config": args.config,
            "environment": args.env,
            "config_keys": sorted(config),
        }
    })

    try:
        with open(args.path, "r", encoding="utf-8") as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Cannot read log file {args.path}: {e}")
        return 1

    generator = MarkovChainGenerator(logger=logger.getChild("generator"))
    trainer = TRAINERS[options["format"]](options["author"], content)

    monitor = ResourceMonitor(logger)
    monitor.start("training")
    trainer.source_train(generator, learn_params)
    monitor.log_progress("Training finished", extra_metrics={
        "states": len(generator),
        "format": options["format"],
    })
    monitor.stop()

    generated = 0
    for _ in range(options["output_strings"]):
        try:
            output = generator.generate(chain_params)
        except ChainError as e:
            logger.warning(f"Skipping generation: {e}")
            continue
        print(output)
        generated += 1

    log_json(logger, "Generation finished", {
        "requested": options["output_strings"],
        "generated": generated,
    })
    return 0


if __name__ == "__main__":
    sys.exit(main())
