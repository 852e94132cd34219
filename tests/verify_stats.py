import unittest
from datetime import datetime

from kubesnap import __version__
from kubesnap.core.stats import aggregate, build_summary
from kubesnap.models import (
    CollectedResource,
    CollectionOptions,
    CollectionResult,
    FetchFailure,
    ResourceScope,
    ResourceTypeDescriptor,
)

POD = ResourceTypeDescriptor("Pod", "v1", ResourceScope.NAMESPACED, "pods")
NODE = ResourceTypeDescriptor("Node", "v1", ResourceScope.CLUSTER, "nodes")


def resources(descriptor, names, namespace=None):
    return [CollectedResource(descriptor, {"metadata": {"name": n}}, namespace) for n in names]


def sample_result():
    return CollectionResult(
        cluster={"Node": resources(NODE, ["n1", "n2"])},
        namespaced={
            "a": {"Pod": resources(POD, ["p1", "p2", "p3"], "a")},
            "b": {"Pod": resources(POD, ["p4"], "b")},
            "empty": {},
        },
        failures=[FetchFailure("Event", "timeout", "a")],
    )


class TestAggregate(unittest.TestCase):
    def test_counts(self):
        stats = aggregate(sample_result())
        self.assertEqual(stats.cluster_counts, {"Node": 2})
        self.assertEqual(stats.namespace_counts["a"], {"Pod": 3})
        self.assertEqual(stats.namespace_totals, {"a": 3, "b": 1, "empty": 0})
        self.assertEqual(stats.resource_type_counts, {"Node": 2, "Pod": 4})
        self.assertEqual(stats.total_cluster_resources, 2)
        self.assertEqual(stats.total_namespaced_resources, 4)
        self.assertEqual(stats.total_resources, 6)
        self.assertEqual(stats.total_namespaces, 3)

    def test_repeatable(self):
        result = sample_result()
        self.assertEqual(aggregate(result), aggregate(result))

    def test_empty_result(self):
        stats = aggregate(CollectionResult())
        self.assertEqual(stats.total_resources, 0)
        self.assertEqual(stats.total_namespaces, 0)


class TestSummary(unittest.TestCase):
    def test_summary_sections(self):
        result = sample_result()
        options = CollectionOptions(include_events=True)
        summary = build_summary(
            aggregate(result), options, result, "yaml",
            persistence={"files_written": 6, "instances_skipped": 0, "write_failures": 0},
            timestamp=datetime(2024, 5, 1, 12, 0, 0),
        )

        info = summary["collection_info"]
        self.assertEqual(info["timestamp"], "2024-05-01T12:00:00")
        self.assertEqual(info["version"], __version__)
        self.assertTrue(info["sanitized"])
        self.assertEqual(info["optional_resources_included"], ["events"])
        self.assertEqual(info["namespaces"], ["a", "b", "empty"])
        self.assertEqual(info["failed_resource_types"], ["a/Event: timeout"])

        self.assertEqual(summary["cluster_summary"]["total_resources"], 6)
        self.assertEqual(summary["cluster_resources"]["resource_types"], {"Node": 2})
        self.assertEqual(summary["namespace_details"]["a"], {"total_resources": 3, "resource_types": {"Pod": 3}})
        self.assertEqual(summary["persistence"]["files_written"], 6)

    def test_summary_without_persistence(self):
        result = CollectionResult()
        summary = build_summary(aggregate(result), CollectionOptions(), result, "json")
        self.assertNotIn("persistence", summary)
        self.assertEqual(summary["collection_info"]["format"], "json")


if __name__ == '__main__':
    unittest.main()
