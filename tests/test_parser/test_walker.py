"""Tests for specform.parser.walker."""

from __future__ import annotations

from typing import Callable

import pytest

from specform.exceptions import BrokenReference
from specform.models import APIOperation, Document, HTTPMethod, Resource
from specform.parser.walker import (
    DEFAULT_RESOURCE,
    DocumentVisitor,
    DocumentWalker,
    resource_name_for,
)


class RecordingVisitor(DocumentVisitor):
    def __init__(self) -> None:
        self.events: list[tuple[str, ...]] = []

    def visit_resource(self, resource: Resource) -> None:
        self.events.append(("resource", resource.name))

    def visit_operation(self, resource: Resource, operation: APIOperation) -> None:
        self.events.append(("operation", resource.name, operation.operation_id or ""))

    def finish(self) -> None:
        self.events.append(("finish",))


class TestResourceNameFor:
    def test_first_tag_wins(self) -> None:
        op = APIOperation(path="/pets", method=HTTPMethod.GET, tags=["animals", "pets"])
        assert resource_name_for(op) == "animals"

    def test_first_static_segment(self) -> None:
        op = APIOperation(path="/{tenant}/orders/{id}", method=HTTPMethod.GET)
        assert resource_name_for(op) == "orders"

    def test_default_when_only_placeholders(self) -> None:
        op = APIOperation(path="/{id}", method=HTTPMethod.GET)
        assert resource_name_for(op) == DEFAULT_RESOURCE

    def test_root_path(self) -> None:
        assert resource_name_for(APIOperation(path="/", method=HTTPMethod.GET)) == "default"


class TestWalkOrder:
    def test_events_grouped_by_resource(self, petstore_document: Document) -> None:
        visitor = RecordingVisitor()
        DocumentWalker(petstore_document).walk(visitor)

        assert visitor.events[0] == ("resource", "pet")
        assert visitor.events[-1] == ("finish",)
        resources = [event[1] for event in visitor.events if event[0] == "resource"]
        assert resources == ["pet", "store", "users"]

        pet_ops = [
            event[2] for event in visitor.events if event[0] == "operation" and event[1] == "pet"
        ]
        assert pet_ops == [
            "addPet",
            "updatePet",
            "findPetsByStatus",
            "getPetById",
            "deletePet",
            "uploadFile",
        ]

    def test_resource_description_from_document_tag(self, petstore_document: Document) -> None:
        resources = DocumentWalker(petstore_document).resources()
        descriptions = {resource.name: resource.description for resource in resources}
        assert descriptions == {
            "pet": "Everything about your Pets",
            "store": "Access to Petstore orders",
            "users": None,
        }

    def test_interleaved_resources_keep_first_seen_order(
        self, make_document: Callable[..., Document]
    ) -> None:
        document = make_document(
            paths={
                "/b": {"get": {"tags": ["beta"], "operationId": "b1"}},
                "/a": {"get": {"tags": ["alpha"], "operationId": "a1"}},
                "/b2": {"get": {"tags": ["beta"], "operationId": "b2"}},
            }
        )
        resources = DocumentWalker(document).resources()
        assert [r.name for r in resources] == ["beta", "alpha"]
        assert [op.operation_id for op in resources[0].operations] == ["b1", "b2"]

    def test_walk_is_repeatable(self, petstore_document: Document) -> None:
        walker = DocumentWalker(petstore_document)
        first, second = RecordingVisitor(), RecordingVisitor()
        walker.walk(first)
        walker.walk(second)
        assert first.events == second.events


class TestOperations:
    def test_non_method_keys_skipped(self, make_document: Callable[..., Document]) -> None:
        document = make_document(
            paths={
                "/pets": {
                    "summary": "Pets",
                    "servers": [],
                    "x-internal": {"get": "nope"},
                    "get": {"operationId": "listPets"},
                }
            }
        )
        operations = DocumentWalker(document).operations()
        assert [op.operation_id for op in operations] == ["listPets"]

    def test_method_order_follows_document(self, make_document: Callable[..., Document]) -> None:
        document = make_document(
            paths={"/pets": {"delete": {}, "get": {}, "post": {}}}
        )
        methods = [op.method for op in DocumentWalker(document).operations()]
        assert methods == [HTTPMethod.DELETE, HTTPMethod.GET, HTTPMethod.POST]

    def test_fields_copied(self, petstore_document: Document) -> None:
        operations = DocumentWalker(petstore_document).operations()
        find = next(op for op in operations if op.operation_id == "findPetsByStatus")
        assert find.path == "/pet/findByStatus"
        assert find.summary == "Finds Pets by status"
        assert find.description == "Multiple status values can be provided"
        assert find.tags == ["pet"]

    def test_request_body_kept_as_reference(self, petstore_document: Document) -> None:
        operations = DocumentWalker(petstore_document).operations()
        add = next(op for op in operations if op.operation_id == "addPet")
        assert add.request_body == {"$ref": "#/components/requestBodies/Pet"}

    def test_path_item_reference(self, make_document: Callable[..., Document]) -> None:
        document = make_document(
            paths={"/pets": {"$ref": "#/components/pathItems/Pets"}},
            pathItems={"Pets": {"get": {"operationId": "listPets"}}},
        )
        operations = DocumentWalker(document).operations()
        assert operations[0].operation_id == "listPets"

    def test_broken_path_item_reference_names_path(
        self, make_document: Callable[..., Document]
    ) -> None:
        document = make_document(paths={"/pets": {"$ref": "#/components/pathItems/Nope"}})
        with pytest.raises(BrokenReference) as exc_info:
            DocumentWalker(document).operations()
        assert exc_info.value.location == "/pets"
        assert str(exc_info.value).startswith("/pets: Cannot resolve $ref")


class TestParameterMerging:
    def test_path_level_parameters_inherited(self, petstore_document: Document) -> None:
        operations = DocumentWalker(petstore_document).operations()
        get = next(op for op in operations if op.operation_id == "getPetById")
        assert get.parameters == [{"$ref": "#/components/parameters/PetId"}]

    def test_path_level_parameters_come_first(self, petstore_document: Document) -> None:
        operations = DocumentWalker(petstore_document).operations()
        delete = next(op for op in operations if op.operation_id == "deletePet")
        assert delete.parameters[0] == {"$ref": "#/components/parameters/PetId"}
        assert delete.parameters[1]["name"] == "api_key"

    def test_operation_overrides_same_name_and_location(
        self, make_document: Callable[..., Document]
    ) -> None:
        document = make_document(
            paths={
                "/items/{id}": {
                    "parameters": [
                        {"name": "id", "in": "path", "schema": {"type": "string"}},
                        {"name": "verbose", "in": "query"},
                    ],
                    "get": {
                        "parameters": [
                            {"name": "id", "in": "path", "schema": {"type": "integer"}},
                            {"name": "id", "in": "query"},
                        ]
                    },
                }
            }
        )
        params = DocumentWalker(document).operations()[0].parameters
        assert params == [
            {"name": "verbose", "in": "query"},
            {"name": "id", "in": "path", "schema": {"type": "integer"}},
            {"name": "id", "in": "query"},
        ]

    def test_referenced_operation_parameter_overrides(
        self, make_document: Callable[..., Document]
    ) -> None:
        document = make_document(
            paths={
                "/pets/{petId}": {
                    "parameters": [{"name": "petId", "in": "path"}],
                    "get": {"parameters": [{"$ref": "#/components/parameters/PetId"}]},
                }
            },
            parameters={"PetId": {"name": "petId", "in": "path", "required": True}},
        )
        params = DocumentWalker(document).operations()[0].parameters
        assert params == [{"$ref": "#/components/parameters/PetId"}]
