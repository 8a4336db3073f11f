"""
Unit tests for the Coral shape decoder.
"""

import unittest

from service_model_generate.pipeline.errors import ModelDecodeError
from service_model_generate.pipeline.model.model_nodes import (
    BlobField,
    BooleanField,
    DoubleField,
    IntegerField,
    LengthRange,
    ListField,
    LongField,
    MapField,
    MemberLocation,
    NumericRange,
    StringField,
    TimestampField,
)
from service_model_generate.pipeline.shape_ast.nodes import StructureAttributes
from service_model_generate.pipeline.shape_ast.parser import ShapeDecoder


class TestShapeDecoder(unittest.TestCase):
    """Test decoding of individual shapes"""

    def setUp(self):
        self.decoder = ShapeDecoder()

    def test_string(self):
        decoded = self.decoder.decode("WidgetId", {"type": "string", "pattern": "^[a-z]+$", "min": 1, "max": 64})
        self.assertEqual(decoded, StringField(regex="^[a-z]+$", length=LengthRange(1, 64)))

    def test_string_enumeration(self):
        decoded = self.decoder.decode("Color", {"type": "string", "enum": ["red", "dark-blue"]})
        self.assertEqual(decoded.value_constraints, (("red", "red"), ("dark-blue", "dark-blue")))

    def test_numbers(self):
        self.assertEqual(self.decoder.decode("A", {"type": "integer", "min": 1, "max": 10}), IntegerField(NumericRange(1, 10)))
        self.assertEqual(self.decoder.decode("B", {"type": "long"}), LongField())
        self.assertEqual(self.decoder.decode("C", {"type": "double", "min": 0.5}), DoubleField(NumericRange(0.5, None)))
        self.assertEqual(self.decoder.decode("D", {"type": "float"}), DoubleField())

    def test_simple_types(self):
        self.assertEqual(self.decoder.decode("A", {"type": "boolean"}), BooleanField())
        self.assertEqual(self.decoder.decode("B", {"type": "timestamp"}), TimestampField())
        self.assertEqual(self.decoder.decode("C", {"type": "blob"}), BlobField())

    def test_containers(self):
        decoded = self.decoder.decode("Names", {"type": "list", "member": {"shape": "Name"}, "max": 5})
        self.assertEqual(decoded, ListField(element_type="Name", length=LengthRange(None, 5)))
        decoded = self.decoder.decode("Tags", {"type": "map", "key": {"shape": "Key"}, "value": {"shape": "Value"}})
        self.assertEqual(decoded, MapField(key_type="Key", value_type="Value"))

    def test_list_without_member_raises(self):
        with self.assertRaises(ModelDecodeError):
            self.decoder.decode("Names", {"type": "list"})

    def test_unknown_type_raises_with_path(self):
        with self.assertRaises(ModelDecodeError) as context:
            self.decoder.decode("Weird", {"type": "union"})
        self.assertEqual(context.exception.path, "#/shapes/Weird")
        self.assertIn("union", str(context.exception))

    def test_structure_members_are_sorted_and_positioned(self):
        decoded = self.decoder.decode(
            "Widget",
            {
                "type": "structure",
                "required": ["zeta"],
                "members": {
                    "zeta": {"shape": "String"},
                    "alpha": {"shape": "String", "locationName": "Alpha"},
                    "legacy": {"shape": "String", "deprecated": True},
                    "middle": {"shape": "Integer", "documentation": "In the middle."},
                },
            },
        )
        self.assertIsInstance(decoded, StructureAttributes)
        self.assertEqual(list(decoded.members), ["alpha", "middle", "zeta"])
        self.assertEqual([member.position for member in decoded.members.values()], [0, 1, 2])
        self.assertTrue(decoded.members["zeta"].required)
        self.assertFalse(decoded.members["alpha"].required)
        self.assertEqual(decoded.members["alpha"].location_name, "Alpha")
        self.assertEqual(decoded.members["middle"].documentation, "In the middle.")

    def test_structure_member_locations(self):
        decoded = self.decoder.decode(
            "Request",
            {
                "type": "structure",
                "members": {
                    "id": {"shape": "String", "location": "uri"},
                    "limit": {"shape": "Integer", "location": "querystring"},
                    "token": {"shape": "String", "location": "header", "locationName": "x-token"},
                    "body": {"shape": "String"},
                },
                "payload": "body",
            },
        )
        self.assertEqual(decoded.fields_at(MemberLocation.URI), ("id",))
        self.assertEqual(decoded.fields_at(MemberLocation.QUERY), ("limit",))
        self.assertEqual(decoded.fields_at(MemberLocation.HEADER, MemberLocation.HEADERS), ("token",))
        self.assertEqual(decoded.payload_as_member, "body")

    def test_unknown_member_location_raises(self):
        with self.assertRaises(ModelDecodeError):
            self.decoder.decode("Request", {"type": "structure", "members": {"id": {"shape": "String", "location": "cookie"}}})

    def test_structure_without_members_raises(self):
        with self.assertRaises(ModelDecodeError):
            self.decoder.decode("Request", {"type": "structure"})

    def test_exception_structure(self):
        decoded = self.decoder.decode(
            "NotFound",
            {
                "type": "structure",
                "members": {},
                "error": {"code": "NotFound", "httpStatusCode": 404, "senderFault": True},
            },
        )
        self.assertTrue(decoded.is_exception)
        self.assertEqual(decoded.error_attributes.code, "NotFound")
        self.assertEqual(decoded.error_attributes.http_status_code, 404)

        decoded = self.decoder.decode("Failure", {"type": "structure", "members": {}, "exception": True})
        self.assertTrue(decoded.is_exception)
        self.assertIsNone(decoded.error_attributes)


if __name__ == "__main__":
    unittest.main()
