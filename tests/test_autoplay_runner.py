# tests/test_autoplay_runner.py
import unittest
import sys
import os
import json
import logging
import tempfile
from contextlib import redirect_stdout
from io import StringIO

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from cascade_sim.application.simulation.autoplay_runner import AutoplayRunner, AutoplayStats
from cascade_sim.domain.events.event_dispatcher import EventDispatcher
from cascade_sim.domain.events.game_events import GameEventType
from cascade_sim.domain.game.entities.game_engine import GameEngine
from cascade_sim.domain.game.factories.engine_factory import EngineFactory
from cascade_sim.infrastructure.config.loaders.yaml_loader import YamlConfigLoader
from cascade_sim.infrastructure.config.validators.schema_validator import SchemaValidator
from cascade_sim.infrastructure.logging.log_manager import log_manager
from cascade_sim.infrastructure.rng.rng_provider import RNGProvider
from cascade_sim.infrastructure.rng.strategies.mersenne_rng import MersenneTwisterRNG
from cascade_sim import main as cli

from support import ScriptedRNG, make_config


class TestAutoplayRunner(unittest.TestCase):
    """Test cases for autoplay runs and their statistics."""

    def make_engine(self, **overrides):
        return GameEngine("autoplay", make_config(**overrides), MersenneTwisterRNG(seed_value=11))

    def test_accounting_matches_balance(self):
        """Bets minus wins equals what the balance lost."""
        engine = self.make_engine(initial_balance=100000)
        stats = AutoplayRunner(engine, {"max_spins": 200}).run()

        self.assertEqual(stats.spins, 200)
        self.assertEqual(stats.stop_reason, "max_spins")
        self.assertAlmostEqual(stats.start_balance - stats.end_balance, stats.total_bet - stats.total_win)
        self.assertEqual(stats.end_balance, engine.balance)
        self.assertGreaterEqual(stats.hit_rate, 0.0)
        self.assertLessEqual(stats.hit_rate, 1.0)

    def test_stops_on_insufficient_balance(self):
        engine = self.make_engine(initial_balance=0)
        stats = AutoplayRunner(engine, {"max_spins": 10}).run()

        self.assertEqual(stats.spins, 0)
        self.assertEqual(stats.stop_reason, "insufficient_balance")

    def test_stops_on_cascade_limit(self):
        """A spin that never settles ends the run and leaves the balance untouched."""
        engine = GameEngine("autoplay", make_config(max_cascades=1), ScriptedRNG([0.0]))
        stats = AutoplayRunner(engine, {"max_spins": 10}).run()

        self.assertEqual(stats.stop_reason, "cascade_limit")
        self.assertEqual(stats.spins, 0)
        self.assertEqual(stats.end_balance, stats.start_balance)
        self.assertFalse(engine.is_spinning)

    def test_buying_packages(self):
        engine = self.make_engine(initial_balance=100000)
        stats = AutoplayRunner(engine, {"max_spins": 12, "buy_package": "standard"}).run()

        self.assertGreaterEqual(stats.free_spins_purchased, 2)
        self.assertGreaterEqual(stats.free_spins_played, 10)
        self.assertAlmostEqual(stats.start_balance - stats.end_balance, stats.total_bet - stats.total_win)

    def test_handlers_are_removed_after_run(self):
        engine = self.make_engine(initial_balance=1000)
        AutoplayRunner(engine, {"max_spins": 5}).run()
        self.assertEqual(engine.event_dispatcher.subscribers(GameEventType.ORDER_COMPLETED), [])
        self.assertEqual(engine.event_dispatcher.subscribers(GameEventType.SUPER_BONUS_AWARDED), [])

    def test_report(self):
        stats = AutoplayStats(game_id="g")
        self.assertEqual(stats.to_dict()["win_multiplier_mean"], 0.0)

        stats.update_spin(cost=10, credited=30, bet=10, cascades=2, was_free_spin=False)
        stats.update_spin(cost=10, credited=0, bet=10, cascades=0, was_free_spin=True)
        report = stats.to_dict()

        self.assertEqual(report["spins"], 2)
        self.assertEqual(report["return_to_player"], 1.5)
        self.assertEqual(report["hit_rate"], 0.5)
        self.assertEqual(report["win_multiplier_mean"], 1.5)
        self.assertEqual(report["win_multiplier_max"], 3.0)
        self.assertEqual(report["max_cascades"], 2)
        self.assertEqual(report["free_spins_played"], 1)


class TestEngineFactory(unittest.TestCase):
    """Test cases for building engines from configuration."""

    def test_requires_provider(self):
        with self.assertRaises(ValueError):
            EngineFactory().create_engine("g", make_config())

    def test_from_default_file(self):
        factory = EngineFactory(RNGProvider(), EventDispatcher())
        engine = factory.create_engine_from_file(YamlConfigLoader(SchemaValidator()), seed=1)

        self.assertEqual(engine.id, "food_slots")
        self.assertEqual(engine.balance, 1000000)
        self.assertEqual(len(engine.catalog), 11)
        self.assertIs(engine.event_dispatcher, factory.event_dispatcher)

    def test_seeded_engines_replay(self):
        factory = EngineFactory(RNGProvider())
        first = factory.create_engine("g", make_config(initial_balance=100000), "numpy", seed=8)
        second = factory.create_engine("g", make_config(initial_balance=100000), "numpy", seed=8)
        for _ in range(20):
            first.spin()
            second.spin()
        self.assertEqual(first.balance, second.balance)
        self.assertEqual(first.grid.to_symbol_ids(), second.grid.to_symbol_ids())


class TestCommandLine(unittest.TestCase):
    """Test cases for the command line entry point."""

    def tearDown(self):
        log_manager.shutdown()
        logging.getLogger().setLevel(logging.WARNING)

    def test_run_writes_report(self):
        with tempfile.TemporaryDirectory() as tmp_dir:
            output = os.path.join(tmp_dir, "reports", "run.json")
            with redirect_stdout(StringIO()):
                code = cli.main(["--spins", "25", "--seed", "3", "--log-mode", "none", "-o", output])

            self.assertEqual(code, 0)
            with open(output, encoding='utf-8') as f:
                report = json.load(f)
            self.assertEqual(report["game_id"], "food_slots")
            self.assertEqual(report["spins"], 25)

    def test_bad_config_path(self):
        with redirect_stdout(StringIO()):
            code = cli.main(["-c", "/nonexistent/game.yaml", "--spins", "1"])
        self.assertEqual(code, 1)

    def test_log_modes(self):
        args = cli.parse_arguments(["--log-mode", "domain"])
        log_config = cli.build_log_config({"logging": {"level": "INFO"}}, args)
        self.assertEqual(log_config["level"], "WARNING")
        self.assertEqual(log_config["loggers"]["domain"], {"level": "DEBUG"})

        args = cli.parse_arguments(["-v"])
        self.assertEqual(cli.build_log_config({}, args)["level"], "DEBUG")


if __name__ == '__main__':
    unittest.main()
