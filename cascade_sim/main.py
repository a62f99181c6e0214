# cascade_sim/main.py
import argparse
import json
import os
import sys
import time

from cascade_sim.infrastructure.config.loaders.yaml_loader import YamlConfigLoader, ConfigError
from cascade_sim.infrastructure.config.validators.schema_validator import SchemaValidator
from cascade_sim.infrastructure.logging.log_manager import initialize_logging
from cascade_sim.infrastructure.rng.rng_provider import RNGProvider

from cascade_sim.domain.events.event_dispatcher import EventDispatcher
from cascade_sim.domain.game.factories.engine_factory import (
    EngineFactory, DEFAULT_GAME_CONFIG, GAME_CONFIG_SCHEMA
)

from cascade_sim.application.simulation.autoplay_runner import AutoplayRunner


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Cascading cluster-pay slot simulator")

    parser.add_argument(
        "-c", "--config",
        default=DEFAULT_GAME_CONFIG,
        help="Path to game configuration file"
    )
    parser.add_argument(
        "-n", "--spins",
        type=int,
        default=1000,
        help="Number of spins to play"
    )
    parser.add_argument(
        "--bet",
        type=float,
        default=None,
        help="Bet per spin (ignored when outside the configured bounds)"
    )
    parser.add_argument(
        "--ante",
        choices=["none", "low", "high"],
        default="none",
        help="Ante mode"
    )
    parser.add_argument(
        "--buy",
        choices=["cheap", "standard"],
        default=None,
        help="Buy this free-spin package whenever no session is running"
    )
    parser.add_argument(
        "--rng",
        choices=list(RNGProvider.available_strategies()),
        default=None,
        help="RNG strategy (overrides the config file)"
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="RNG seed (overrides the config file)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output"
    )
    parser.add_argument(
        "--log-mode",
        choices=["all", "app", "domain", "none"],
        default=None,
        help="Select logging mode: 'all'=verbose, 'app'=application only, 'domain'=domain only, 'none'=minimal"
    )
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show a progress bar"
    )
    parser.add_argument(
        "-o", "--output",
        default=None,
        help="Write the JSON report to this path"
    )

    return parser.parse_args(argv)


def build_log_config(config, args):
    log_config = dict(config.get("logging", {}) or {})
    loggers = dict(log_config.get("loggers", {}) or {})

    if args.log_mode == "all":
        log_config["level"] = "DEBUG"
    elif args.log_mode == "app":
        log_config["level"] = "WARNING"
        loggers["application"] = {"level": "DEBUG"}
        loggers["infrastructure"] = {"level": "DEBUG"}
        loggers["domain"] = {"level": "WARNING"}
    elif args.log_mode == "domain":
        log_config["level"] = "WARNING"
        loggers["domain"] = {"level": "DEBUG"}
        loggers["application"] = {"level": "WARNING"}
        loggers["infrastructure"] = {"level": "WARNING"}
    elif args.log_mode == "none":
        log_config["level"] = "WARNING"
        loggers = {}

    if args.verbose:
        log_config["level"] = "DEBUG"

    log_config["loggers"] = loggers
    return log_config


def main(argv=None):
    """Main entry point for the cascade slot simulator."""
    args = parse_arguments(argv)
    start_time = time.time()

    config_loader = YamlConfigLoader(SchemaValidator())
    try:
        config = config_loader.load_file(args.config, GAME_CONFIG_SCHEMA)
    except ConfigError as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    initialize_logging(build_log_config(config, args), force=True)

    factory = EngineFactory(RNGProvider(), EventDispatcher())
    game_id = config.get("game_id") or os.path.splitext(os.path.basename(args.config))[0]
    try:
        engine = factory.create_engine(game_id, config, args.rng, args.seed)
    except ValueError as e:
        print(f"Error creating game engine: {e}", file=sys.stderr)
        return 1

    if args.bet is not None:
        engine.set_bet(args.bet)
    engine.set_ante_mode(args.ante)

    runner = AutoplayRunner(engine, {
        "max_spins": args.spins,
        "buy_package": args.buy,
        "show_progress": args.progress,
    })
    report = runner.run().to_dict()

    print(f"Game:            {report['game_id']}")
    print(f"Spins played:    {report['spins']} ({report['free_spins_played']} free)")
    print(f"Total bet:       {report['total_bet']:.2f}")
    print(f"Total win:       {report['total_win']:.2f}")
    print(f"RTP:             {report['return_to_player'] * 100:.2f}%")
    print(f"Hit rate:        {report['hit_rate'] * 100:.2f}%")
    print(f"Max cascades:    {report['max_cascades']}")
    print(f"Free spins:      {report['free_spins_triggered']} triggered, {report['free_spins_purchased']} bought")
    print(f"Orders:          {report['orders_completed']} completed, {report['super_bonuses']} super bonuses")
    print(f"Balance:         {report['start_balance']:.2f} -> {report['end_balance']:.2f}")
    print(f"Stop reason:     {report['stop_reason']}")

    if args.output:
        output_dir = os.path.dirname(args.output)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)
        with open(args.output, 'w', encoding='utf-8') as f:
            json.dump(report, f, indent=2)
        print(f"Report written to {args.output}")

    print(f"Completed in {time.time() - start_time:.2f} seconds")
    return 0


if __name__ == "__main__":
    sys.exit(main())
