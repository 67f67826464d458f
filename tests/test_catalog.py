import os
import tempfile
import unittest

from blkmarket_mcp.dynamic.catalog import CatalogError, load_catalog, tool_from_config
from blkmarket_mcp.dynamic.models import HTTPMethod, ParameterLocation, SchemaKind


class TestToolFromConfig(unittest.TestCase):

    def test_body_fields_derived_for_body_methods(self):
        """Test body fields are the non-parameter properties for POST, PUT and PATCH."""
        tool = tool_from_config({
            "name": "createPayment",
            "method": "post",
            "path": "/api/orders/{orderId}/payments",
            "input_schema": {
                "type": "object",
                "properties": {"orderId": {"type": "string"}, "method": {"type": "string"}, "amount": {"type": "number"}},
            },
            "parameters": [{"name": "orderId", "in": "path"}],
        })
        self.assertEqual(tool.endpoint.method, HTTPMethod.POST)
        self.assertEqual(tool.endpoint.body_field_names, ("method", "amount"))
        param = tool.endpoint.path_and_query_params[0]
        self.assertEqual(param.location, ParameterLocation.PATH)
        self.assertTrue(param.required)
        self.assertEqual(param.schema.kind, SchemaKind.STRING)

    def test_get_has_no_body_fields(self):
        """Test GET endpoints never get body fields."""
        tool = tool_from_config({
            "name": "search",
            "method": "GET",
            "path": "/api/search",
            "input_schema": {"type": "object", "properties": {"q": {"type": "string"}}},
        })
        self.assertEqual(tool.endpoint.body_field_names, ())

    def test_explicit_body_list_wins(self):
        """Test an explicit body list overrides the derived one."""
        tool = tool_from_config({
            "name": "subscribe",
            "method": "POST",
            "path": "/api/newsletter",
            "input_schema": {"type": "object", "properties": {"email": {"type": "string"}, "debug": {"type": "boolean"}}},
            "body": ["email"],
        })
        self.assertEqual(tool.endpoint.body_field_names, ("email",))

    def test_input_schema_built_from_parameters(self):
        """Test the input schema is synthesized from parameters when absent."""
        tool = tool_from_config({
            "name": "getUser",
            "label": "Get user",
            "method": "GET",
            "path": "/api/users/{userId}",
            "parameters": [
                {"name": "userId", "in": "path", "type": "string", "description": "User id"},
                {"name": "verbose", "in": "query", "type": "boolean"},
            ],
        })
        self.assertEqual(tool.label, "Get user")
        self.assertEqual(tool.input_schema, {
            "type": "object",
            "properties": {
                "userId": {"type": "string", "description": "User id"},
                "verbose": {"type": "boolean"},
            },
            "required": ["userId"],
        })
        self.assertEqual(tool.endpoint.path_and_query_params[1].schema.kind, SchemaKind.BOOLEAN)

    def test_required_parameters_published_as_required(self):
        """Test required path parameters are added to the published input schema."""
        input_schema = {"type": "object", "properties": {"id": {"type": "string"}, "q": {"type": "string"}}}
        config = {
            "name": "getWidget",
            "method": "GET",
            "path": "/widget/{id}",
            "input_schema": input_schema,
            "parameters": [{"name": "id", "in": "path"}, {"name": "q", "in": "query"}],
        }
        tool = tool_from_config(config)
        self.assertEqual(tool.input_schema["required"], ["id"])
        self.assertNotIn("required", input_schema)

        config["input_schema"] = {**input_schema, "required": ["q"]}
        tool = tool_from_config(config)
        self.assertEqual(tool.input_schema["required"], ["q", "id"])

    def test_invalid_configurations(self):
        """Test malformed tool configurations raise CatalogError."""
        bad_configs = [
            {"method": "GET", "path": "/x"},
            {"name": "a", "path": "/x"},
            {"name": "a", "method": "TRACE", "path": "/x"},
            {"name": "a", "method": "GET", "path": "/x", "parameters": [{"in": "query"}]},
            {"name": "a", "method": "GET", "path": "/x", "parameters": [{"name": "b", "in": "header"}]},
            {"name": "a", "method": "GET", "path": "/x", "input_schema": ["not", "a", "mapping"]},
            "not a mapping",
        ]
        for config in bad_configs:
            with self.assertRaises(CatalogError, msg=str(config)):
                tool_from_config(config)


class TestLoadCatalog(unittest.TestCase):

    def write_catalog(self, text):
        handle, path = tempfile.mkstemp(suffix=".yaml")
        with os.fdopen(handle, "w", encoding="utf-8") as f:
            f.write(text)
        self.addCleanup(os.remove, path)
        return path

    def test_packaged_catalog_loads(self):
        """Test the shipped endpoints.yaml loads."""
        catalog = load_catalog()
        self.assertEqual(catalog.base_url, "https://blkmarket.ar")
        names = [tool.name for tool in catalog.tools]
        self.assertEqual(len(names), len(set(names)))
        self.assertIn("getProduct", names)
        for tool in catalog.tools:
            for param in tool.endpoint.path_and_query_params:
                if param.location is ParameterLocation.PATH:
                    self.assertIn(f"{{{param.name}}}", tool.endpoint.path_template)

    def test_custom_catalog(self):
        """Test loading a catalog from a custom path."""
        path = self.write_catalog(
            "endpoints:\n"
            "  - name: ping\n"
            "    method: GET\n"
            "    path: /ping\n"
        )
        catalog = load_catalog(path)
        self.assertIsNone(catalog.base_url)
        self.assertEqual([tool.name for tool in catalog.tools], ["ping"])

    def test_duplicate_names_rejected(self):
        """Test a catalog declaring a tool twice is rejected."""
        path = self.write_catalog(
            "endpoints:\n"
            "  - {name: ping, method: GET, path: /ping}\n"
            "  - {name: ping, method: POST, path: /ping}\n"
        )
        with self.assertRaises(CatalogError):
            load_catalog(path)

    def test_non_mapping_catalog_rejected(self):
        """Test a catalog that is not a mapping is rejected."""
        with self.assertRaises(CatalogError):
            load_catalog(self.write_catalog("- just\n- a list\n"))


if __name__ == '__main__':
    unittest.main()
