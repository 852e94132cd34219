import copy
import unittest

from kubesnap.core.sanitizer import VOLATILE_METADATA_FIELDS, sanitize


def live_deployment():
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {
            "name": "web",
            "namespace": "default",
            "uid": "1234",
            "resourceVersion": "99",
            "selfLink": "/apis/apps/v1/namespaces/default/deployments/web",
            "creationTimestamp": "2024-01-01T00:00:00Z",
            "generation": 3,
            "managedFields": [{"manager": "kubectl"}],
            "labels": {"app": "web"},
        },
        "spec": {"replicas": 2},
        "status": {"readyReplicas": 2},
    }


class TestSanitizer(unittest.TestCase):
    def test_strips_server_fields(self):
        cleaned = sanitize(live_deployment())
        self.assertNotIn("status", cleaned)
        for field in VOLATILE_METADATA_FIELDS:
            self.assertNotIn(field, cleaned["metadata"])
        self.assertEqual(cleaned["metadata"], {"name": "web", "namespace": "default", "labels": {"app": "web"}})
        self.assertEqual(cleaned["spec"], {"replicas": 2})

    def test_does_not_mutate_input(self):
        document = live_deployment()
        snapshot = copy.deepcopy(document)
        sanitize(document)
        self.assertEqual(document, snapshot)

    def test_idempotent(self):
        once = sanitize(live_deployment())
        self.assertEqual(sanitize(once), once)

    def test_never_adds_fields(self):
        document = {"kind": "ConfigMap", "data": {"a": "1"}}
        cleaned = sanitize(document)
        self.assertEqual(cleaned, document)
        self.assertTrue(set(cleaned).issubset(document))

    def test_preserves_key_order(self):
        cleaned = sanitize(live_deployment())
        self.assertEqual(list(cleaned), ["apiVersion", "kind", "metadata", "spec"])

    def test_raw_mode_returns_equal_copy(self):
        document = live_deployment()
        raw = sanitize(document, enabled=False)
        self.assertEqual(raw, document)
        self.assertIsNot(raw, document)

    def test_non_mapping_passthrough(self):
        self.assertEqual(sanitize([1, 2]), [1, 2])
        self.assertIsNone(sanitize(None))

    def test_nested_status_kept(self):
        document = {"spec": {"status": "keep-me"}, "metadata": {"name": "x"}}
        self.assertEqual(sanitize(document)["spec"], {"status": "keep-me"})


if __name__ == '__main__':
    unittest.main()
