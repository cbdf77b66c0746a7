"""
Tests for the document adapter module.
"""

import unittest

from openapi_symbolgraph.errors import ParsingError, SchemaDecodingFailure, UnsupportedInputFormat
from openapi_symbolgraph.schema.adapter import DocumentAdapter
from openapi_symbolgraph.schema.document_types import (
    ArraySchema,
    CompositionSchema,
    HttpMethod,
    IntegerSchema,
    NotSchema,
    NullSchema,
    NumberSchema,
    ObjectSchema,
    ReferenceSchema,
    StringSchema,
    UndecodableSchema,
    UnknownSchema,
)


def pet_store_document():
    """Small document exercising paths, components and references."""
    return {
        "openapi": "3.0.3",
        "info": {"title": "Pet Store", "version": "1.0.0", "contact": {"name": "API Team"}},
        "servers": [{"url": "https://api.example.com/v1", "description": "Production"}],
        "tags": [{"name": "pets", "description": "Pet operations"}],
        "security": [{"apiKey": []}],
        "paths": {
            "/pets/{petId}": {
                "parameters": [
                    {"name": "petId", "in": "path", "schema": {"type": "string"}},
                    {"$ref": "#/components/parameters/Trace"},
                ],
                "get": {
                    "operationId": "getPet",
                    "tags": ["pets"],
                    "parameters": [
                        {"name": "petId", "in": "path", "required": True, "description": "Pet id",
                         "schema": {"type": "integer"}},
                    ],
                    "responses": {
                        "200": {"$ref": "#/components/responses/PetResponse"},
                        404: {"description": "Not found"},
                    },
                },
                "delete": {
                    "security": [{"oauth": ["write:pets"]}],
                    "responses": {"204": {"description": "Deleted"}},
                },
                "summary": "Not an operation",
            },
        },
        "components": {
            "parameters": {
                "Trace": {"name": "X-Trace", "in": "header", "schema": {"type": "string"}},
            },
            "responses": {
                "PetResponse": {
                    "description": "A pet",
                    "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Pet"}}},
                },
            },
            "schemas": {
                "Pet": {
                    "type": "object",
                    "required": ["id"],
                    "properties": {
                        "id": {"type": "integer", "format": "int64"},
                        "tags": {"type": "array", "items": {"type": "string"}},
                    },
                },
            },
            "securitySchemes": {
                "apiKey": {"type": "apiKey", "name": "X-API-Key", "in": "header"},
                "oauth": {
                    "type": "oauth2",
                    "flows": {"implicit": {"authorizationUrl": "https://auth.example.com",
                                           "scopes": {"write:pets": "Modify pets"}}},
                },
            },
        },
    }


class TestDocumentAdapter(unittest.TestCase):
    """Test cases for DocumentAdapter.normalize."""

    def setUp(self):
        """Set up test fixtures."""
        self.adapter = DocumentAdapter(source="petstore.yaml")

    def test_document_metadata(self):
        """Test info, servers, tags and security schemes."""
        document = self.adapter.normalize(pet_store_document())
        self.assertEqual(document.info.title, "Pet Store")
        self.assertEqual(document.info.contact.name, "API Team")
        self.assertEqual(document.servers[0].url, "https://api.example.com/v1")
        self.assertEqual(document.tags[0].name, "pets")
        self.assertEqual(document.security_schemes["apiKey"].parameter_name, "X-API-Key")
        self.assertEqual(document.security_schemes["oauth"].flows["implicit"].scopes, {"write:pets": "Modify pets"})

    def test_operations(self):
        """Test operation extraction, parameter merging and reference resolution."""
        document = self.adapter.normalize(pet_store_document())
        self.assertEqual(len(document.operations), 2)

        operations = document.sorted_operations()
        self.assertEqual([op.method for op in operations], [HttpMethod.DELETE, HttpMethod.GET])

        get_pet = operations[1]
        self.assertEqual(get_pet.operation_id, "getPet")
        parameters = {(p.name, p.location): p for p in get_pet.parameters}
        self.assertEqual(set(parameters), {("petId", "path"), ("X-Trace", "header")})

        # Operation-level parameter overrides the path-level one
        self.assertIsInstance(parameters[("petId", "path")].schema_node, IntegerSchema)
        self.assertEqual(parameters[("petId", "path")].description, "Pet id")
        self.assertFalse(parameters[("X-Trace", "header")].required)

        self.assertEqual(set(get_pet.responses), {"200", "404"})
        media = get_pet.responses["200"].content["application/json"]
        self.assertIsInstance(media.schema_node, ReferenceSchema)
        self.assertEqual(media.schema_node.name, "Pet")

    def test_security_fallback(self):
        """Test that operations inherit document security unless they declare their own."""
        document = self.adapter.normalize(pet_store_document())
        delete_pet, get_pet = document.sorted_operations()
        self.assertEqual(get_pet.security, [{"apiKey": []}])
        self.assertEqual(delete_pet.security, [{"oauth": ["write:pets"]}])

    def test_path_parameters_required_by_default(self):
        """Test that path parameters default to required."""
        raw = pet_store_document()
        del raw["paths"]["/pets/{petId}"]["get"]["parameters"]
        document = self.adapter.normalize(raw)
        get_pet = document.sorted_operations()[1]
        pet_id = [p for p in get_pet.parameters if p.name == "petId"][0]
        self.assertTrue(pet_id.required)
        self.assertIsInstance(pet_id.schema_node, StringSchema)

    def test_flags_require_booleans(self):
        """Test that string flag values are ignored rather than read as truthy."""
        raw = {
            "openapi": "3.0.0",
            "paths": {
                "/a": {
                    "get": {
                        "deprecated": "false",
                        "parameters": [
                            {"name": "q", "in": "query", "deprecated": "false", "required": "false"},
                            {"name": "id", "in": "path", "required": "no"},
                        ],
                        "requestBody": {"required": "false", "content": {}},
                        "responses": {"200": {"description": "ok"}},
                    },
                    "post": {
                        "deprecated": True,
                        "parameters": [{"name": "q", "in": "query", "deprecated": True, "required": True}],
                        "responses": {"200": {"description": "ok"}},
                    },
                },
            },
        }
        get_a, post_a = self.adapter.normalize(raw).sorted_operations()
        self.assertFalse(get_a.deprecated)
        parameters = {p.name: p for p in get_a.parameters}
        self.assertFalse(parameters["q"].deprecated)
        self.assertFalse(parameters["q"].required)
        self.assertTrue(parameters["id"].required)
        self.assertFalse(get_a.request_body.required)

        self.assertTrue(post_a.deprecated)
        self.assertTrue(post_a.parameters[0].deprecated)
        self.assertTrue(post_a.parameters[0].required)

    def test_invalid_documents(self):
        """Test document-level structural failures."""
        with self.assertRaises(ParsingError):
            self.adapter.normalize(["not", "a", "mapping"])
        with self.assertRaises(ParsingError):
            self.adapter.normalize({"openapi": "3.0.0", "paths": ["/pets"]})
        with self.assertRaises(UnsupportedInputFormat):
            self.adapter.normalize({"swagger": "2.0", "paths": {}})
        with self.assertRaises(UnsupportedInputFormat):
            self.adapter.normalize({"openapi": "2.5.0"})

    def test_default_title(self):
        """Test that a missing title defaults to API."""
        document = self.adapter.normalize({"openapi": "3.1.0"})
        self.assertEqual(document.info.title, "API")
        self.assertEqual(document.operations, [])

    def test_unresolvable_reference_skipped(self):
        """Test that external and dangling references are skipped."""
        raw = {
            "openapi": "3.0.0",
            "paths": {
                "/a": {
                    "get": {
                        "parameters": [
                            {"$ref": "other.yaml#/components/parameters/X"},
                            {"$ref": "#/components/parameters/Missing"},
                        ],
                        "responses": {"200": {"description": "ok"}},
                    },
                },
            },
        }
        operation = self.adapter.normalize(raw).operations[0]
        self.assertEqual(operation.parameters, [])


class TestSchemaDecoding(unittest.TestCase):
    """Test cases for DocumentAdapter.decode_schema."""

    def setUp(self):
        """Set up test fixtures."""
        self.adapter = DocumentAdapter()

    def test_type_variants(self):
        """Test decoding of each schema type."""
        self.assertIsInstance(self.adapter.decode_schema({"type": "string"}, "#"), StringSchema)
        self.assertIsInstance(self.adapter.decode_schema({"type": "number"}, "#"), NumberSchema)
        self.assertIsInstance(self.adapter.decode_schema({"type": "null"}, "#"), NullSchema)
        self.assertIsInstance(self.adapter.decode_schema({"$ref": "#/components/schemas/Pet"}, "#"), ReferenceSchema)
        self.assertIsInstance(self.adapter.decode_schema({}, "#"), UnknownSchema)

        inferred = self.adapter.decode_schema({"properties": {"a": {"type": "string"}}}, "#")
        self.assertIsInstance(inferred, ObjectSchema)
        self.assertIsInstance(self.adapter.decode_schema({"items": {"type": "string"}}, "#"), ArraySchema)

    def test_compositions(self):
        """Test allOf, oneOf and not decoding."""
        node = self.adapter.decode_schema({"oneOf": [{"type": "string"}, {"type": "integer"}]}, "#")
        self.assertIsInstance(node, CompositionSchema)
        self.assertEqual(node.kind, "oneOf")
        self.assertEqual(len(node.members), 2)

        negated = self.adapter.decode_schema({"not": {"type": "string"}}, "#")
        self.assertIsInstance(negated, NotSchema)
        self.assertIsInstance(negated.negated, StringSchema)

    def test_nullable_type_list(self):
        """Test OpenAPI 3.1 type lists containing null."""
        node = self.adapter.decode_schema({"type": ["string", "null"]}, "#")
        self.assertIsInstance(node, StringSchema)
        self.assertTrue(node.nullable)

        legacy = self.adapter.decode_schema({"type": "string", "nullable": True}, "#")
        self.assertTrue(legacy.nullable)

        quoted = self.adapter.decode_schema({"type": "string", "nullable": "false"}, "#")
        self.assertFalse(quoted.nullable)

    def test_exclusive_bounds(self):
        """Test both forms of exclusive bounds."""
        legacy = self.adapter.decode_schema(
            {"type": "integer", "minimum": 0, "exclusiveMinimum": True, "maximum": 10}, "#"
        )
        self.assertEqual(legacy.minimum.value, 0)
        self.assertTrue(legacy.minimum.exclusive)
        self.assertFalse(legacy.maximum.exclusive)

        modern = self.adapter.decode_schema({"type": "number", "exclusiveMaximum": 5}, "#")
        self.assertEqual(modern.maximum.value, 5)
        self.assertTrue(modern.maximum.exclusive)
        self.assertIsNone(modern.minimum)

    def test_decoding_failures(self):
        """Test that malformed schemas raise with the JSON pointer."""
        with self.assertRaises(SchemaDecodingFailure) as context:
            self.adapter.decode_schema({"type": "string", "enum": "red"}, "#/components/schemas/Color")
        self.assertEqual(context.exception.path, "#/components/schemas/Color")

        with self.assertRaises(SchemaDecodingFailure):
            self.adapter.decode_schema("not a schema", "#")
        with self.assertRaises(SchemaDecodingFailure):
            self.adapter.decode_schema({"type": "string", "minLength": "long"}, "#")

    def test_placeholder_for_bad_schema(self):
        """Test that one bad reusable schema degrades without aborting the document."""
        document = self.adapter.normalize({
            "openapi": "3.0.0",
            "components": {
                "schemas": {
                    "Good": {"type": "string"},
                    "Bad": {"type": "object", "properties": {"x": {"type": 42}}, "description": "Broken"},
                },
            },
        })
        self.assertIsInstance(document.schemas["Good"], StringSchema)
        bad = document.schemas["Bad"]
        self.assertIsInstance(bad, UndecodableSchema)
        self.assertEqual(bad.description, "Broken")
        self.assertIn("#/components/schemas/Bad/properties/x", bad.error)


if __name__ == "__main__":
    unittest.main()
