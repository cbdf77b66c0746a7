"""
End-to-end tests for the conversion entry points.

These tests read and write real files in a temporary directory.
"""

import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import pytest

from openapi_symbolgraph import convert_document, convert_file, default_module_name, generate_catalog
from openapi_symbolgraph.config import Settings
from openapi_symbolgraph.errors import CatalogAlreadyExists, UnsupportedInputFormat
from openapi_symbolgraph.schema.symbol_types import SymbolKind

PET_STORE_YAML = """
openapi: 3.0.3
info:
  title: Swagger Petstore
  version: 1.0.0
  description: Sample pet store
servers:
  - url: https://petstore.example.com/v1
paths:
  /pets:
    get:
      operationId: listPets
      tags: [pets]
      parameters:
        - name: limit
          in: query
          schema:
            type: integer
            format: int32
            maximum: 100
      responses:
        "200":
          description: A paged array of pets
          content:
            application/json:
              schema:
                type: array
                items:
                  $ref: "#/components/schemas/Pet"
    post:
      tags: [pets]
      requestBody:
        content:
          application/json:
            schema:
              $ref: "#/components/schemas/Pet"
      responses:
        "201":
          description: Created
components:
  schemas:
    Pet:
      type: object
      required: [id, name]
      properties:
        id:
          type: integer
          format: int64
        name:
          type: string
        born:
          type: string
          format: date-time
"""


@pytest.mark.integration
class TestConverter(unittest.TestCase):
    """End-to-end tests for convert_file and generate_catalog."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.directory = Path(self.temp_dir.name)
        self.input_path = self.directory / "petstore.yaml"
        self.input_path.write_text(PET_STORE_YAML, encoding="utf-8")

    def tearDown(self):
        """Clean up test fixtures."""
        self.temp_dir.cleanup()

    def test_convert_file(self):
        """Test writing the symbol-graph JSON."""
        output_path = self.directory / "out" / "petstore.symbols.json"
        graph = convert_file(self.input_path, output_path=output_path)

        self.assertEqual(graph.module.name, "SwaggerPetstore")
        self.assertTrue(output_path.is_file())

        data = json.loads(output_path.read_text(encoding="utf-8"))
        self.assertEqual(data, json.loads(json.dumps(graph.to_json_dict())))
        self.assertEqual(data["metadata"]["generator"], "openapi-symbolgraph")
        self.assertEqual(set(data["metadata"]["formatVersion"]), {"major", "minor", "patch"})

        identifiers = {symbol["identifier"] for symbol in data["symbols"]}
        self.assertIn("f:SwaggerPetstore.listPets", identifiers)
        self.assertIn("f:SwaggerPetstore.post_pets", identifiers)
        self.assertIn("s:SwaggerPetstore.Pet.born", identifiers)
        for relationship in data["relationships"]:
            self.assertEqual(relationship["kind"], "memberOf")
            self.assertIn(relationship["source"], identifiers)
            self.assertIn(relationship["target"], identifiers)

    def test_module_name_override(self):
        """Test overriding the module name and base URL."""
        graph = convert_file(
            self.input_path,
            output_path=self.directory / "pets.json",
            module_name="Pets",
            base_url="http://localhost:8080"
        )
        self.assertEqual(graph.namespace.identifier, "s:Pets")
        endpoint = graph.get_symbol("f:Pets.listPets")
        self.assertEqual(endpoint.mixins["httpEndpoint"]["baseURL"], "http://localhost:8080")

    def test_generate_catalog(self):
        """Test generating a full catalog and refusing to clobber it."""
        catalog = generate_catalog(self.input_path, output_directory=self.directory, overwrite=False)
        self.assertEqual(catalog.name, "SwaggerPetstore.catalog")
        self.assertTrue((catalog / "SwaggerPetstore.md").is_file())
        self.assertTrue((catalog / "swaggerpetstore.symbols.json").is_file())
        self.assertTrue((catalog / "Endpoints" / "listPets.md").is_file())
        self.assertTrue((catalog / "Endpoints" / "post_pets.md").is_file())
        self.assertTrue((catalog / "Schemas" / "Pet.md").is_file())

        with self.assertRaises(CatalogAlreadyExists):
            generate_catalog(self.input_path, output_directory=self.directory, overwrite=False)

        again = generate_catalog(self.input_path, output_directory=self.directory, overwrite=True)
        self.assertEqual(again, catalog)

    def test_catalog_stays_in_output_directory(self):
        """Test that path characters in a module name cannot move the catalog."""
        output = self.directory / "out"
        catalog = generate_catalog(self.input_path, output_directory=output, module_name="../Escape")
        self.assertEqual(catalog, output / "Escape.catalog")
        self.assertTrue((catalog / "Escape.md").is_file())
        self.assertTrue((catalog / "escape.symbols.json").is_file())
        self.assertFalse((self.directory / "Escape.catalog").exists())

    def test_unsupported_input(self):
        """Test rejecting Swagger 2.0 input."""
        swagger_path = self.directory / "legacy.json"
        swagger_path.write_text('{"swagger": "2.0", "paths": {}}', encoding="utf-8")
        with self.assertRaises(UnsupportedInputFormat):
            convert_file(swagger_path, output_path=self.directory / "legacy.symbols.json")
        self.assertFalse((self.directory / "legacy.symbols.json").exists())


class TestConvertDocument(unittest.TestCase):
    """Test cases for in-memory conversion helpers."""

    def test_convert_document(self):
        """Test converting an already parsed mapping."""
        graph = convert_document({
            "openapi": "3.1.0",
            "info": {"title": "Tiny"},
            "paths": {"/": {"get": {"responses": {"204": {"description": "Empty"}}}}},
        })
        self.assertEqual(graph.module.name, "Tiny")
        self.assertEqual([e.title for e in graph.symbols_of_kind(SymbolKind.ENDPOINT)], ["get_root"])

    def test_default_module_name(self):
        """Test deriving module names from titles."""
        self.assertEqual(default_module_name("Swagger Petstore"), "SwaggerPetstore")
        self.assertEqual(default_module_name("my-api_v2!"), "myapi_v2")
        self.assertEqual(default_module_name("***"), "API")
        self.assertEqual(default_module_name(""), "API")

    def test_module_name_override_sanitized(self):
        """Test that an explicit module name is reduced to identifier characters."""
        raw = {
            "openapi": "3.0.0",
            "info": {"title": "Tiny"},
            "paths": {"/": {"get": {"responses": {"204": {"description": "Empty"}}}}},
        }
        graph = convert_document(raw, module_name="My API/v2")
        self.assertEqual(graph.module.name, "MyAPIv2")
        self.assertEqual(graph.namespace.identifier, "s:MyAPIv2")
        self.assertEqual(convert_document(raw, module_name="../..").module.name, "API")

    def test_settings_from_environment(self):
        """Test that settings read prefixed environment variables."""
        environment = {
            "OPENAPI_SYMBOLGRAPH_MODULE_NAME": "FromEnv",
            "OPENAPI_SYMBOLGRAPH_OVERWRITE": "true",
            "OPENAPI_SYMBOLGRAPH_INCLUDE_EXAMPLES": "false",
        }
        with mock.patch.dict(os.environ, environment):
            settings = Settings()
        self.assertEqual(settings.module_name, "FromEnv")
        self.assertTrue(settings.overwrite)
        self.assertFalse(settings.include_examples)
        self.assertEqual(settings.log_level, "INFO")


if __name__ == "__main__":
    unittest.main()
