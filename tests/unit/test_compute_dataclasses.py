import base64
import json
import unittest

from rhinoview.compute.dataclasses import (
    DataTree,
    EvaluationRequest,
    EvaluationResponse,
    Item,
    branch_key,
)


class TestDataTree(unittest.TestCase):
    """Test DataTree construction and wire format."""

    def test_branch_key(self):
        """Test index paths are formatted as data tree keys."""
        self.assertEqual(branch_key([0]), "{0}")
        self.assertEqual(branch_key([0, 1, 2]), "{0;1;2}")

    def test_append_single_branch(self):
        """Test appending a value under branch {0}."""
        tree = DataTree("Height")
        tree.append([0], [50.0])

        self.assertEqual(
            tree.to_dict(),
            {"ParamName": "Height", "InnerTree": {"{0}": [{"data": "50.0"}]}},
        )

    def test_append_extends_existing_branch(self):
        """Test repeated appends to the same path extend the branch in order."""
        tree = DataTree("Points")
        tree.append([0], [1])
        tree.append([0], [2, 3])
        tree.append([1], [4])

        inner_tree = tree.to_dict()["InnerTree"]
        self.assertEqual(list(inner_tree), ["{0}", "{1}"])
        self.assertEqual([item["data"] for item in inner_tree["{0}"]], ["1", "2", "3"])


class TestEvaluationRequest(unittest.TestCase):
    """Test EvaluationRequest serialization."""

    def test_bytes_definition_sent_as_algo(self):
        """Test definition contents are base64 encoded."""
        tree = DataTree("Radius")
        tree.append([0], [10.0])
        request = EvaluationRequest(definition=b"gh-bytes", trees=[tree])

        payload = request.to_dict()

        self.assertEqual(base64.b64decode(payload["algo"]), b"gh-bytes")
        self.assertIsNone(payload["pointer"])
        self.assertEqual(payload["values"], [tree.to_dict()])

    def test_string_definition_sent_as_pointer(self):
        """Test a definition URL is sent as pointer."""
        request = EvaluationRequest(definition="http://host/def.gh", trees=[])

        payload = json.loads(request.to_json())

        self.assertIsNone(payload["algo"])
        self.assertEqual(payload["pointer"], "http://host/def.gh")

    def test_tree_order_preserved(self):
        """Test trees are serialized in the given order."""
        trees = [DataTree(name) for name in ["Height", "Radius", "Offset"]]
        request = EvaluationRequest(definition=b"", trees=trees)

        names = [value["ParamName"] for value in request.to_dict()["values"]]

        self.assertEqual(names, ["Height", "Radius", "Offset"])


class TestEvaluationResponse(unittest.TestCase):
    """Test EvaluationResponse parsing."""

    def test_from_dict(self):
        """Test outputs, branches and items are parsed in order."""
        body = {
            "values": [
                {
                    "ParamName": "RH_OUT:mesh",
                    "InnerTree": {
                        "{1}": [{"type": "System.String", "data": '"b"'}],
                        "{0}": [{"type": "System.String", "data": '"a"'}],
                    },
                },
                {"ParamName": "RH_OUT:empty", "InnerTree": {}},
            ],
            "errors": ["boom"],
            "warnings": ["careful"],
        }

        response = EvaluationResponse.from_dict(body)

        self.assertEqual(len(response.outputs), 2)
        self.assertEqual(response.outputs[0].param_name, "RH_OUT:mesh")
        self.assertEqual(list(response.outputs[0].inner_tree), ["{1}", "{0}"])
        self.assertEqual(
            response.outputs[0].inner_tree["{0}"][0],
            Item(type="System.String", data='"a"'),
        )
        self.assertEqual(response.errors, ["boom"])
        self.assertEqual(response.warnings, ["careful"])
        self.assertIs(response.raw, body)

    def test_missing_values_raises(self):
        """Test a body without values is rejected."""
        with self.assertRaises(ValueError):
            EvaluationResponse.from_dict({"errors": []})

    def test_non_string_item_data_is_json_encoded(self):
        """Test item payloads are always kept as JSON strings."""
        item = Item.from_dict({"type": "System.Double", "data": 1.5})

        self.assertEqual(item.data, "1.5")


if __name__ == "__main__":
    unittest.main()
