# tests/test_order_tracker.py
import unittest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from cascade_sim.domain.orders.entities.order import Order
from cascade_sim.domain.orders.services.order_tracker import OrderTracker, OrderRules

from support import ScriptedRNG, make_catalog, BASE_CONFIG


class TestOrder(unittest.TestCase):
    """Test cases for a single order."""

    def test_progress_is_capped(self):
        order = Order("burger", quantity=10, tip_multiplier=5)
        self.assertEqual(order.add_progress(8), 8)
        self.assertEqual(order.add_progress(8), 2)
        self.assertEqual(order.collected, 10)
        self.assertTrue(order.is_fulfilled)
        self.assertEqual(order.remaining, 0)

    def test_completion_is_one_way(self):
        order = Order("pie", quantity=8, tip_multiplier=2, collected=8)
        self.assertTrue(order.mark_completed())
        self.assertFalse(order.mark_completed())
        self.assertTrue(order.completed)
        self.assertEqual(order.add_progress(5), 0)

    def test_unfulfilled_order_cannot_complete(self):
        order = Order("pie", quantity=8, tip_multiplier=2, collected=7)
        self.assertFalse(order.mark_completed())
        self.assertFalse(order.completed)

    def test_collected_is_clamped(self):
        self.assertEqual(Order("taco", quantity=5, tip_multiplier=1, collected=9).collected, 5)
        self.assertEqual(Order("taco", quantity=5, tip_multiplier=1, collected=-3).collected, 0)

    def test_quantity_must_be_positive(self):
        with self.assertRaises(ValueError):
            Order("taco", quantity=0, tip_multiplier=1)


class TestOrderRules(unittest.TestCase):
    """Test cases for parsing order rules."""

    def test_free_tips_default_to_normal_tips(self):
        rules = OrderRules.from_config(BASE_CONFIG["orders"])
        self.assertEqual(rules.normal_tip_multipliers, (5,))
        self.assertEqual(rules.free_tip_multipliers, (5,))
        self.assertEqual(rules.super_bonus_multiplier, 100)

    def test_inverted_range_rejected(self):
        with self.assertRaises(ValueError):
            OrderRules.from_config({"normal_mode": {"min_quantity": 20, "max_quantity": 10}})

    def test_empty_tips_rejected(self):
        with self.assertRaises(ValueError):
            OrderRules.from_config({"normal_mode": {"tip_multipliers": []}})


class TestOrderTracker(unittest.TestCase):
    """Test cases for order generation, progress and settlement."""

    def setUp(self):
        self.catalog = make_catalog()
        self.rules = OrderRules.from_config(BASE_CONFIG["orders"])

    def make_tracker(self, rng=None):
        return OrderTracker(self.catalog, self.rules, rng or ScriptedRNG([0.5]))

    def test_no_order_when_chance_is_zero(self):
        tracker = self.make_tracker()
        self.assertIsNone(tracker.start_spin(0.0))
        self.assertEqual(tracker.orders, [])

    def test_certain_order(self):
        """Chance 1 always creates exactly one order drawn from the rules."""
        tracker = self.make_tracker(ScriptedRNG([0.99], ints=[12], choices=[3]))
        order = tracker.start_spin(1.0)

        self.assertEqual(order.symbol_id, "pizza")
        self.assertEqual(order.quantity, 12)
        self.assertEqual(order.tip_multiplier, 5)
        self.assertEqual(len(tracker.orders), 1)

    def test_orders_never_target_scatter(self):
        tracker = self.make_tracker(ScriptedRNG([0.5], choices=list(range(20))))
        for _ in range(20):
            order = tracker.start_spin(1.0)
            self.assertFalse(self.catalog.get(order.symbol_id).is_scatter)

    def test_start_spin_drops_leftovers(self):
        tracker = self.make_tracker()
        tracker.restore([Order("burger", 8, 5)])
        tracker.start_spin(0.0)
        self.assertEqual(tracker.orders, [])

    def test_record_win_only_advances_matching_orders(self):
        tracker = self.make_tracker()
        tracker.restore([Order("burger", 10, 5), Order("pie", 10, 5)])
        tracker.record_win("burger", 12)

        burger, pie = tracker.orders
        self.assertEqual(burger.collected, 10)
        self.assertEqual(pie.collected, 0)

    def test_base_game_settlement_pays_tip(self):
        tracker = self.make_tracker()
        tracker.restore([Order("pizza", 10, 5)])
        tracker.record_win("pizza", 12)

        settlement = tracker.settle_spin(bet=10, in_free_spins=False)
        self.assertEqual(settlement.tips, 50)
        self.assertEqual(len(settlement.completed), 1)
        self.assertTrue(tracker.orders[0].completed)

        # A completed order never pays twice
        self.assertEqual(tracker.settle_spin(bet=10, in_free_spins=False).tips, 0)

    def test_base_game_clears_unfinished_order(self):
        tracker = self.make_tracker()
        tracker.restore([Order("pizza", 10, 5)])
        tracker.record_win("pizza", 4)

        settlement = tracker.settle_spin(bet=10, in_free_spins=False)
        self.assertTrue(settlement.cleared)
        self.assertEqual(settlement.tips, 0)
        self.assertEqual(tracker.orders, [])

    def test_free_spin_orders_persist(self):
        tracker = self.make_tracker()
        tracker.restore([Order("pizza", 20, 5)])
        tracker.record_win("pizza", 8)
        tracker.settle_spin(bet=10, in_free_spins=True)
        tracker.record_win("pizza", 8)

        self.assertEqual(tracker.orders[0].collected, 16)

    def test_start_free_spin_session(self):
        tracker = self.make_tracker(ScriptedRNG([0.5], ints=[15, 20], choices=[0, 1, 2, 1]))
        orders = tracker.start_free_spin_session(2, tip_multipliers=[7, 9])

        self.assertEqual([(o.symbol_id, o.quantity, o.tip_multiplier) for o in orders],
                         [("burger", 15, 9), ("pie", 20, 9)])

    def test_free_spin_order_count_within_rules(self):
        tracker = self.make_tracker(ScriptedRNG(ints=[99]))
        self.assertEqual(tracker.draw_free_spin_order_count(), self.rules.free_max_orders)

    def test_super_bonus_when_all_completed(self):
        tracker = self.make_tracker()
        tracker.restore([Order("burger", 12, 2, 12, True), Order("pie", 12, 3, 12, True)])

        settlement = tracker.settle_session(bet=10)
        self.assertEqual(settlement.super_bonus, 1000)
        self.assertEqual(tracker.orders, [])

    def test_no_super_bonus_when_one_is_open(self):
        tracker = self.make_tracker()
        tracker.restore([Order("burger", 12, 2, 12, True), Order("pie", 12, 3, 11)])

        settlement = tracker.settle_session(bet=10)
        self.assertEqual(settlement.super_bonus, 0)
        self.assertEqual(len(settlement.completed), 1)
        self.assertEqual(tracker.orders, [])

    def test_no_super_bonus_without_orders(self):
        self.assertEqual(self.make_tracker().settle_session(bet=10).super_bonus, 0)

    def test_orders_property_returns_copies(self):
        tracker = self.make_tracker()
        tracker.restore([Order("burger", 12, 2)])
        tracker.orders[0].collected = 11
        self.assertEqual(tracker.orders[0].collected, 0)


if __name__ == '__main__':
    unittest.main()
