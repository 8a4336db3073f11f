"""
Unified service model builder for OpenAPI 3 and Swagger 2 documents.

Schemas become structures and field constraints, and each path operation
becomes an OperationDescription whose parameters are gathered into a
synthesized request structure.
"""

from __future__ import annotations

import logging
from typing import Any

from ...utils import snake_to_pascal_case, upper_camel_case
from ..errors import ModelConsistencyError, ModelDecodeError
from .model_nodes import (
    BlobField,
    BooleanField,
    DoubleField,
    FieldConstraint,
    IntegerField,
    LengthRange,
    ListField,
    LongField,
    MapField,
    Member,
    NumericRange,
    OperationDescription,
    OperationInputDescription,
    OperationOutputDescription,
    ServiceDescription,
    ServiceMetadata,
    ServiceModel,
    StringField,
    StructureDescription,
    TimestampField,
    frozen_mapping,
)
from .reference_resolver import ReferenceResolver

logger = logging.getLogger(__name__)

HTTP_METHODS = ("delete", "get", "head", "options", "patch", "post", "put")

# Parameter keys that describe the parameter's type in Swagger 2
_SWAGGER_TYPE_KEYS = ("type", "format", "enum", "pattern", "minLength", "maxLength", "minimum", "maximum", "items", "minItems", "maxItems")

PAYLOAD_MEMBER = "Body"

_PARAMETER_ORDER = {"path": 0, "query": 1, "header": 2}


class OpenAPIServiceModelBuilder:
    """Builds a ServiceModel from an OpenAPI 3.0 or Swagger 2.0 document."""

    def __init__(self, base_name: str):
        """
        Initialize the builder.

        Args:
            base_name: Service base name, used as the endpoint prefix
        """
        self.base_name = base_name
        self.structures: dict[str, StructureDescription] = {}
        self.fields: dict[str, FieldConstraint] = {}
        self._aliases: dict[str, str] = {}
        self._reserved: set[str] = set()
        self._document: dict[str, Any] = {}

    def build(self, document: dict[str, Any]) -> ServiceModel:
        """
        Build the unified model.

        Args:
            document: The parsed OpenAPI/Swagger document

        Returns:
            The unified ServiceModel

        Raises:
            ModelDecodeError: If the document uses unsupported constructs
            ModelConsistencyError: If a reference cannot be resolved
        """
        if not isinstance(document, dict) or ("openapi" not in document and "swagger" not in document):
            raise ModelDecodeError("Document is neither an OpenAPI 3 nor a Swagger 2 document", "#")
        self.structures = {}
        self.fields = {}
        self._aliases = {}
        self._document = document

        if "openapi" in document:
            schemas = document.get("components", {}).get("schemas", {})
            schema_root = "#/components/schemas"
        else:
            schemas = document.get("definitions", {})
            schema_root = "#/definitions"

        self._reserved = set(schemas)
        for name in sorted(schemas):
            self._type_for(schemas[name], name, f"{schema_root}/{name}", named=True)
        self._resolve_aliases()

        operations: dict[str, OperationDescription] = {}
        error_types: set[str] = set()
        for url in sorted(document.get("paths", {})):
            path_item = document["paths"][url]
            for method in HTTP_METHODS:
                if method not in path_item:
                    continue
                raw = path_item[method]
                operation_name = self._operation_name(raw, method, url)
                if operation_name in operations:
                    raise ModelConsistencyError(f"Operation name '{operation_name}' is used by more than one path operation")
                path = f"#/paths/{url}/{method}"
                operation = self._build_operation(operation_name, raw, path_item.get("parameters", []), method, url, path)
                error_types.update(error for error, _ in operation.errors)
                operations[operation_name] = operation

        metadata = ServiceMetadata(
            api_version=document.get("info", {}).get("version"),
            endpoint_prefix=self.base_name,
            protocol="rest-json",
            service_full_name=document.get("info", {}).get("title"),
        )
        model = ServiceModel(
            service_descriptions=frozen_mapping({self.base_name: ServiceDescription(operations=tuple(sorted(operations)))}),
            operation_descriptions=frozen_mapping(operations),
            structure_descriptions=frozen_mapping(self.structures),
            field_descriptions=frozen_mapping(self.fields),
            error_types=frozenset(error_types),
            metadata=metadata,
            content_type="application/json",
        )
        ReferenceResolver(model).validate()
        logger.info("Built service model with %d operations from OpenAPI document", len(operations))
        return model

    def _operation_name(self, raw: dict[str, Any], method: str, url: str) -> str:
        if raw.get("operationId"):
            return upper_camel_case(raw["operationId"])
        return snake_to_pascal_case(method) + "".join(snake_to_pascal_case(part.strip("{}")) for part in url.split("/") if part)

    def _build_operation(
        self,
        operation_name: str,
        raw: dict[str, Any],
        shared_parameters: list[dict[str, Any]],
        method: str,
        url: str,
        path: str,
    ) -> OperationDescription:
        parameters = {}
        for parameter in [*shared_parameters, *raw.get("parameters", [])]:
            parameter = self._deref(parameter)
            parameters[(parameter.get("in", "query"), parameter["name"])] = parameter

        body_schema = self._body_schema(raw, parameters)
        input_name, input_description = self._build_input(operation_name, parameters, body_schema, path)
        output_name, output_description = self._build_output(operation_name, raw.get("responses", {}), path)

        errors = []
        for status in sorted(raw.get("responses", {})):
            if not status.isdigit() or int(status) < 400:
                continue
            schema = self._response_schema(raw["responses"][status])
            if schema is not None and "$ref" in schema:
                errors.append((self._ref_name(schema["$ref"]), int(status)))

        return OperationDescription(
            input=input_name,
            output=output_name,
            http_verb=method.upper(),
            http_url=url,
            errors=tuple(errors),
            input_description=input_description,
            output_description=output_description,
            documentation=raw.get("summary") or raw.get("description"),
        )

    def _body_schema(self, raw: dict[str, Any], parameters: dict) -> dict[str, Any] | None:
        # Swagger 2 bodies are parameters, OpenAPI 3 bodies are request bodies
        body_keys = [key for key in parameters if key[0] == "body"]
        if body_keys:
            return parameters.pop(body_keys[0]).get("schema")
        request_body = raw.get("requestBody")
        if request_body is None:
            return None
        return self._content_schema(self._deref(request_body))

    def _build_input(
        self,
        operation_name: str,
        parameters: dict,
        body_schema: dict[str, Any] | None,
        path: str,
    ) -> tuple[str | None, OperationInputDescription]:
        if not parameters:
            if body_schema is None:
                return None, OperationInputDescription()
            if "$ref" in body_schema and self._ref_name(body_schema["$ref"]) in self.structures:
                return self._ref_name(body_schema["$ref"]), OperationInputDescription()

        request_name = self._synthesized_name(f"{operation_name}Request")
        members: dict[str, Member] = {}
        required: set[str] = set()
        located: dict[str, list[str]] = {"path": [], "query": [], "header": []}
        for location, name in sorted(parameters, key=lambda key: (_PARAMETER_ORDER.get(key[0], len(_PARAMETER_ORDER)), key[1])):
            parameter = parameters[(location, name)]
            if location not in located:
                raise ModelDecodeError(f"Parameter '{name}' has unsupported location '{location}'", path)
            schema = parameter.get("schema") or {key: parameter[key] for key in _SWAGGER_TYPE_KEYS if key in parameter}
            # A name shared by parameters in different locations gets the location as a suffix
            member_name = name
            index = 2
            while member_name in members:
                member_name = name + snake_to_pascal_case(location) + (str(index) if index > 2 else "")
                index += 1
            members[member_name] = Member(
                value=self._type_for(schema, request_name + snake_to_pascal_case(name), f"{path}/parameters/{name}"),
                position=0,
                location_name=name if member_name != name else None,
                documentation=parameter.get("description"),
            )
            if parameter.get("required", False) or location == "path":
                required.add(member_name)
            located[location].append(member_name)

        payload_as_member = None
        if body_schema is not None:
            body_members, body_required = self._object_members(body_schema, request_name, f"{path}/requestBody")
            if body_members is None:
                payload_as_member = PAYLOAD_MEMBER
                members[PAYLOAD_MEMBER] = Member(value=self._type_for(body_schema, request_name + PAYLOAD_MEMBER, path), position=0)
                required.add(PAYLOAD_MEMBER)
            else:
                members.update({name: member for name, member in body_members.items() if name not in members})
                required.update(body_required)

        self._add_structure(request_name, members, required, path)
        return request_name, OperationInputDescription(
            path_fields=tuple(sorted(located["path"])),
            query_fields=tuple(sorted(located["query"])),
            additional_header_fields=tuple(sorted(located["header"])),
            payload_as_member=payload_as_member,
        )

    def _build_output(self, operation_name: str, responses: dict[str, Any], path: str) -> tuple[str | None, OperationOutputDescription]:
        for status in sorted(responses):
            if not status.startswith("2"):
                continue
            response = self._deref(responses[status])
            schema = self._response_schema(response)
            headers = response.get("headers", {})
            if schema is None and not headers:
                return None, OperationOutputDescription()
            if not headers and "$ref" in schema and self._ref_name(schema["$ref"]) in self.structures:
                return self._ref_name(schema["$ref"]), OperationOutputDescription()

            response_name = self._synthesized_name(f"{operation_name}Response")
            members: dict[str, Member] = {}
            required: set[str] = set()
            payload_as_member = None
            if schema is not None:
                body_members, body_required = self._object_members(schema, response_name, f"{path}/responses/{status}")
                if body_members is None:
                    payload_as_member = PAYLOAD_MEMBER
                    members[PAYLOAD_MEMBER] = Member(value=self._type_for(schema, response_name + PAYLOAD_MEMBER, path), position=0)
                else:
                    members.update(body_members)
                    required.update(body_required)
            for header in sorted(headers):
                header_schema = headers[header].get("schema") or {key: headers[header][key] for key in _SWAGGER_TYPE_KEYS if key in headers[header]}
                members[header] = Member(value=self._type_for(header_schema, response_name + snake_to_pascal_case(header), path), position=0)

            self._add_structure(response_name, members, required, path)
            return response_name, OperationOutputDescription(header_fields=tuple(sorted(headers)), payload_as_member=payload_as_member)
        return None, OperationOutputDescription()

    def _object_members(self, schema: dict[str, Any], parent: str, path: str) -> tuple[dict[str, Member] | None, set[str]]:
        """Return the members of an object schema (following references), or None if it is not an object."""
        if "$ref" in schema:
            name = self._ref_name(schema["$ref"])
            if name not in self.structures:
                return None, set()
            structure = self.structures[name]
            return dict(structure.members), {member_name for member_name, member in structure.members.items() if member.required}
        if schema.get("type", "object") != "object" or "properties" not in schema:
            return None, set()
        name = self._type_for(schema, f"{parent}Body", path)
        structure = self.structures.pop(name)
        return dict(structure.members), {member_name for member_name, member in structure.members.items() if member.required}

    def _add_structure(self, name: str, members: dict[str, Member], required: set[str], path: str) -> None:
        if name in self.structures or name in self.fields:
            raise ModelConsistencyError(f"Synthesized structure '{name}' collides with a declared schema ({path})")
        ordered = {
            member_name: Member(
                value=members[member_name].value,
                position=position,
                required=member_name in required,
                location_name=members[member_name].location_name,
                documentation=members[member_name].documentation,
            )
            for position, member_name in enumerate(sorted(members))
        }
        self.structures[name] = StructureDescription(members=frozen_mapping(ordered))

    def _type_for(self, schema: dict[str, Any], name: str, path: str, named: bool = False) -> str:
        """Decode a schema and return the name of the type it declares or references.

        Args:
            schema: The schema object
            name: Name to register the type under if it needs one
            path: Document path, for error messages
            named: Whether the schema is a named component (always registered under ``name``)
        """
        schema = schema or {}
        if "$ref" in schema:
            target = self._ref_name(schema["$ref"])
            if named:
                self._aliases[name] = target
                return name
            return target
        if "allOf" in schema and len(schema["allOf"]) == 1:
            return self._type_for(schema["allOf"][0], name, path, named)
        if "oneOf" in schema or "anyOf" in schema or "allOf" in schema:
            raise ModelDecodeError(f"Schema '{name}' uses an unsupported composition", path)

        schema_type = schema.get("type")
        if schema_type is None and ("properties" in schema or "additionalProperties" in schema):
            schema_type = "object"

        if schema_type == "object":
            additional = schema.get("additionalProperties")
            if "properties" not in schema and additional:
                value_schema = additional if isinstance(additional, dict) else {"type": "string"}
                value_type = self._type_for(value_schema, f"{name}Value", path)
                return self._register_field(name, MapField(key_type=self._register_field("String", StringField()), value_type=value_type), named)
            return self._decode_object(schema, name if named else self._synthesized_name(name), path)
        if schema_type == "array":
            element_type = self._type_for(schema.get("items", {}), f"{name}Item", f"{path}/items")
            return self._register_field(name, ListField(element_type=element_type, length=self._length(schema, "minItems", "maxItems")), named)

        constraint = self._primitive(schema, name, path)
        if named or constraint != type(constraint)():
            return self._register_field(name, constraint, named)
        return self._register_field(type(constraint).__name__.removesuffix("Field"), constraint)

    def _decode_object(self, schema: dict[str, Any], name: str, path: str) -> str:
        required = set(schema.get("required", []))
        members = {}
        properties = schema.get("properties", {})
        for property_name in sorted(properties):
            members[property_name] = Member(
                value=self._type_for(properties[property_name], name + snake_to_pascal_case(property_name), f"{path}/properties/{property_name}"),
                position=0,
                documentation=properties[property_name].get("description"),
            )
        self._add_structure(name, members, required, path)
        self.structures[name] = StructureDescription(members=self.structures[name].members, documentation=schema.get("description"))
        return name

    def _primitive(self, schema: dict[str, Any], name: str, path: str) -> FieldConstraint:
        schema_type = schema.get("type", "string")
        schema_format = schema.get("format")
        if schema_type == "string":
            if schema_format in ("date-time", "date"):
                return TimestampField()
            if schema_format in ("binary", "byte"):
                return BlobField()
            return StringField(
                regex=schema.get("pattern"),
                length=self._length(schema, "minLength", "maxLength"),
                value_constraints=tuple((str(value), str(value)) for value in schema.get("enum", [])),
            )
        if schema_type == "integer":
            numeric_range = NumericRange(minimum=schema.get("minimum"), maximum=schema.get("maximum"))
            return LongField(range=numeric_range) if schema_format == "int64" else IntegerField(range=numeric_range)
        if schema_type == "number":
            return DoubleField(range=NumericRange(minimum=schema.get("minimum"), maximum=schema.get("maximum")))
        if schema_type == "boolean":
            return BooleanField()
        raise ModelDecodeError(f"Schema '{name}' has unrecognized type '{schema_type}'", path)

    def _synthesized_name(self, name: str) -> str:
        """A name for an inline schema that no component schema or registered type uses."""
        candidate = name
        index = 2
        while candidate in self._reserved or candidate in self.structures or candidate in self.fields:
            candidate = f"{name}{index}"
            index += 1
        return candidate

    def _register_field(self, name: str, constraint: FieldConstraint, named: bool = False) -> str:
        candidate = name
        index = 2
        while (
            candidate in self.structures
            or (not named and candidate in self._reserved)
            or (candidate in self.fields and self.fields[candidate] != constraint)
        ):
            candidate = f"{name}{index}"
            index += 1
        self.fields[candidate] = constraint
        return candidate

    def _resolve_aliases(self) -> None:
        unresolved = dict(self._aliases)
        while unresolved:
            progressed = False
            for name, target in sorted(unresolved.items()):
                if target in self.structures:
                    self.structures[name] = self.structures[target]
                elif target in self.fields:
                    self.fields[name] = self.fields[target]
                else:
                    continue
                del unresolved[name]
                progressed = True
            if not progressed:
                raise ModelConsistencyError(f"Schemas {sorted(unresolved)} reference undeclared schemas {sorted(set(unresolved.values()))}")

    def _content_schema(self, container: dict[str, Any]) -> dict[str, Any] | None:
        content = container.get("content", {})
        if not content:
            return None
        media_type = "application/json" if "application/json" in content else sorted(content)[0]
        return content[media_type].get("schema")

    def _response_schema(self, response: dict[str, Any]) -> dict[str, Any] | None:
        response = self._deref(response)
        if "schema" in response:
            return response["schema"]
        return self._content_schema(response)

    def _deref(self, value: dict[str, Any]) -> dict[str, Any]:
        """Follow a local reference to a parameter, request body or response."""
        while isinstance(value, dict) and "$ref" in value and not value["$ref"].startswith(("#/definitions/", "#/components/schemas/")):
            target: Any = self._document
            for part in value["$ref"].lstrip("#/").split("/"):
                if not isinstance(target, dict) or part not in target:
                    raise ModelConsistencyError(f"Unresolvable reference '{value['$ref']}'")
                target = target[part]
            value = target
        return value

    @staticmethod
    def _ref_name(ref: str) -> str:
        if not ref.startswith("#/"):
            raise ModelDecodeError(f"External reference '{ref}' is not supported", ref)
        return ref.rsplit("/", 1)[-1]

    @staticmethod
    def _length(schema: dict[str, Any], minimum_key: str, maximum_key: str) -> LengthRange:
        return LengthRange(minimum=schema.get(minimum_key), maximum=schema.get(maximum_key))
