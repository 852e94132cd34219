#!/usr/bin/env python3
"""
VERIFY INCLUSION POLICY
-----------------------
Decision table, allow-list precedence, purity and the plan text.
"""
import unittest
from dataclasses import replace

from kubesnap.core.policy import describe_plan, is_custom_resource_name, should_collect
from kubesnap.models import CollectionOptions

ALL_ON = CollectionOptions(
    include_secrets=True,
    include_events=True,
    include_replicasets=True,
    include_endpoints=True,
    include_leases=True,
    include_custom_resources=True,
)


class TestDecisionTable(unittest.TestCase):
    def setUp(self):
        self.defaults = CollectionOptions()

    def test_denylist_wins_over_everything(self):
        for kind in ("ComponentStatus", "Binding"):
            self.assertFalse(should_collect(kind, self.defaults))
            self.assertFalse(should_collect(kind, ALL_ON))

    def test_secret_follows_its_toggle(self):
        self.assertFalse(should_collect("Secret", self.defaults))
        self.assertTrue(should_collect("Secret", replace(self.defaults, include_secrets=True)))

    def test_high_volume_kinds_follow_their_toggles(self):
        cases = {
            "Event": "include_events",
            "Lease": "include_leases",
            "Endpoints": "include_endpoints",
            "EndpointSlice": "include_endpoints",
            "ReplicaSet": "include_replicasets",
        }
        for kind, toggle in cases.items():
            self.assertFalse(should_collect(kind, self.defaults), kind)
            self.assertTrue(should_collect(kind, replace(self.defaults, **{toggle: True})), kind)

    def test_toggles_are_independent(self):
        options = replace(self.defaults, include_events=True)
        self.assertTrue(should_collect("Event", options))
        self.assertFalse(should_collect("Lease", options))
        self.assertFalse(should_collect("Secret", options))

    def test_core_kinds_always_collected(self):
        for kind in ("Deployment", "ConfigMap", "Service", "ClusterRole", "Namespace"):
            self.assertTrue(should_collect(kind, self.defaults), kind)

    def test_custom_resources_follow_blanket_toggle(self):
        self.assertFalse(should_collect("widgets.example.com", self.defaults))
        self.assertTrue(should_collect("widgets.example.com", replace(self.defaults, include_custom_resources=True)))


class TestAllowList(unittest.TestCase):
    def test_allow_list_overrides_blanket_toggle(self):
        options = CollectionOptions(include_custom_resources=True, specific_crds=("widgets.example.com",))
        self.assertTrue(should_collect("widgets.example.com", options))
        self.assertFalse(should_collect("gadgets.example.com", options))

    def test_allow_list_enables_without_blanket_toggle(self):
        options = CollectionOptions(include_custom_resources=False, specific_crds=("widgets.example.com",))
        self.assertTrue(should_collect("widgets.example.com", options))

    def test_allow_list_match_is_case_insensitive_and_exact(self):
        options = CollectionOptions(specific_crds=("Widgets.Example.COM",))
        self.assertTrue(should_collect("widgets.example.com", options))
        self.assertFalse(should_collect("widgets.example.co", options))

    def test_empty_allow_list_excludes_every_custom_resource(self):
        options = CollectionOptions(include_custom_resources=True, specific_crds=())
        self.assertFalse(should_collect("widgets.example.com", options))

    def test_allow_list_does_not_touch_builtins(self):
        options = CollectionOptions(specific_crds=("widgets.example.com",))
        self.assertTrue(should_collect("Deployment", options))
        self.assertFalse(should_collect("Secret", options))


class TestProperties(unittest.TestCase):
    def test_purity(self):
        options = replace(ALL_ON, specific_crds=("a.b.c",))
        names = ["Secret", "Event", "a.b.c", "x.y", "Pod", "Binding"]
        first = [should_collect(n, options) for n in names]
        second = [should_collect(n, options) for n in names]
        self.assertEqual(first, second)

    def test_totality_returns_bool(self):
        for name in ("", ".", "Pod", "weird..name", "ComponentStatus"):
            self.assertIsInstance(should_collect(name, CollectionOptions()), bool)

    def test_custom_name_heuristic(self):
        self.assertTrue(is_custom_resource_name("widgets.example.com"))
        self.assertFalse(is_custom_resource_name("Deployment"))


class TestPlan(unittest.TestCase):
    def test_skipped_lines_name_their_flag(self):
        plan = describe_plan(CollectionOptions())
        self.assertIn("Secrets: ⏭️  Skipped (use -s to enable)", plan)
        self.assertIn("Custom Resources: ⏭️  Skipped (use -C to enable)", plan)

    def test_specific_crds_listed(self):
        plan = describe_plan(CollectionOptions(specific_crds=("widgets.example.com", "gadgets.example.com")))
        self.assertIn("Custom Resources: ✅ Specific CRDs: widgets.example.com, gadgets.example.com", plan)

    def test_enabled_lines(self):
        plan = describe_plan(ALL_ON)
        self.assertIn("Events: ✅ Enabled", plan)
        self.assertIn("Leases: ✅ Enabled", plan)


if __name__ == '__main__':
    unittest.main()
