"""
Unified service model builder for Coral/JSON documents.

Phase 2 of the pipeline: decode every shape, classify each operation's
input and output members by HTTP location, synthesize result wrappers and
collect error types into a single ServiceModel.
"""

from __future__ import annotations

import logging
from typing import Any

from ..errors import ModelConsistencyError, ModelDecodeError
from ..shape_ast.nodes import StructureAttributes
from ..shape_ast.parser import ShapeDecoder
from .model_nodes import (
    FieldConstraint,
    Member,
    MemberLocation,
    OperationDescription,
    OperationInputDescription,
    OperationOutputDescription,
    ServiceDescription,
    ServiceMetadata,
    ServiceModel,
    StructureDescription,
    frozen_mapping,
)
from .reference_resolver import ReferenceResolver

logger = logging.getLogger(__name__)

DEFAULT_ERROR_STATUS = 400


class CoralServiceModelBuilder:
    """Builds a ServiceModel from a Coral/JSON document."""

    def __init__(self, decoder: ShapeDecoder | None = None):
        self.decoder = decoder or ShapeDecoder()

    def build(self, document: dict[str, Any]) -> ServiceModel:
        """
        Build the unified model.

        Args:
            document: The parsed Coral document (``metadata``, ``operations``, ``shapes``)

        Returns:
            The unified ServiceModel

        Raises:
            ModelDecodeError: If the document or one of its shapes is malformed
            ModelConsistencyError: If operations reference undeclared shapes or
                place output members at request-only locations
        """
        if not isinstance(document, dict):
            raise ModelDecodeError("Model document is not an object", "#")
        metadata = self._decode_metadata(document.get("metadata"))

        structures: dict[str, StructureAttributes] = {}
        fields: dict[str, FieldConstraint] = {}
        for name in sorted(document.get("shapes", {})):
            decoded = self.decoder.decode(name, document["shapes"][name])
            if isinstance(decoded, StructureAttributes):
                structures[name] = decoded
            else:
                fields[name] = decoded
        logger.debug("Decoded %d structures and %d fields", len(structures), len(fields))

        structure_descriptions = {
            name: StructureDescription(members=attributes.members, documentation=attributes.documentation)
            for name, attributes in structures.items()
        }
        default_input_location = ServiceModel(metadata=metadata).default_input_location

        operations: dict[str, OperationDescription] = {}
        error_types: set[str] = set()
        raw_operations = document.get("operations", {})
        for operation_name in sorted(raw_operations):
            raw = raw_operations[operation_name]
            path = f"#/operations/{operation_name}"
            http = raw.get("http", {})

            input_name = self._shape_name(raw.get("input"))
            input_description = OperationInputDescription(default_input_location=default_input_location)
            if input_name is not None:
                input_attributes = self._structure(operation_name, input_name, structures, fields)
                input_description = OperationInputDescription(
                    path_fields=input_attributes.fields_at(MemberLocation.URI),
                    query_fields=input_attributes.fields_at(MemberLocation.QUERY),
                    additional_header_fields=input_attributes.fields_at(MemberLocation.HEADER, MemberLocation.HEADERS),
                    default_input_location=default_input_location,
                    payload_as_member=input_attributes.payload_as_member,
                )

            output_name = self._shape_name(raw.get("output"))
            output_description = OperationOutputDescription()
            if output_name is not None:
                output_attributes = self._structure(operation_name, output_name, structures, fields)
                request_only = output_attributes.fields_at(MemberLocation.URI, MemberLocation.QUERY)
                if request_only:
                    raise ModelConsistencyError(
                        f"Output '{output_name}' of operation '{operation_name}' binds members {list(request_only)} "
                        f"to a uri or querystring location ({path})"
                    )
                result_wrapper = raw["output"].get("resultWrapper")
                output_description = OperationOutputDescription(
                    header_fields=output_attributes.fields_at(MemberLocation.HEADER, MemberLocation.HEADERS),
                    payload_as_member=output_attributes.payload_as_member,
                    result_wrapper=result_wrapper,
                )
                if result_wrapper is not None:
                    output_name = self._add_result_wrapper(operation_name, output_name, result_wrapper, structure_descriptions, fields)

            errors = []
            for error_ref in raw.get("errors", []):
                error_name = self._shape_name(error_ref)
                if error_name is None:
                    raise ModelDecodeError(f"Operation '{operation_name}' has an error without a shape", path)
                errors.append((error_name, self._error_status(structures.get(error_name))))
                error_types.add(error_name)

            operations[operation_name] = OperationDescription(
                input=input_name,
                output=output_name,
                http_verb=http.get("method"),
                http_url=http.get("requestUri"),
                errors=tuple(errors),
                input_description=input_description,
                output_description=output_description,
                documentation=raw.get("documentation"),
            )

        error_code_mappings = {
            name: attributes.error_attributes.code
            for name, attributes in structures.items()
            if attributes.error_attributes is not None and attributes.error_attributes.code
        }

        model = ServiceModel(
            service_descriptions=frozen_mapping({metadata.endpoint_prefix: ServiceDescription(operations=tuple(sorted(operations)))}),
            operation_descriptions=frozen_mapping(operations),
            structure_descriptions=frozen_mapping(structure_descriptions),
            field_descriptions=frozen_mapping(fields),
            error_types=frozenset(error_types),
            error_code_mappings=frozen_mapping(error_code_mappings),
            metadata=metadata,
            content_type=f"application/x-amz-{metadata.protocol}",
        )
        ReferenceResolver(model).validate()
        logger.info("Built service model with %d operations", len(operations))
        return model

    def _decode_metadata(self, raw: Any) -> ServiceMetadata:
        if not isinstance(raw, dict):
            raise ModelDecodeError("Model document is missing 'metadata'", "#/metadata")
        protocol = raw.get("protocol") or raw.get("protocolName")
        if not protocol:
            raise ModelDecodeError("Metadata is missing 'protocol'", "#/metadata")
        if not raw.get("endpointPrefix"):
            raise ModelDecodeError("Metadata is missing 'endpointPrefix'", "#/metadata")
        return ServiceMetadata(
            api_version=raw.get("apiVersion"),
            endpoint_prefix=raw["endpointPrefix"],
            protocol=protocol,
            signature_version=raw.get("signatureVersion"),
            target_prefix=raw.get("targetPrefix"),
            global_endpoint=raw.get("globalEndpoint"),
            service_full_name=raw.get("serviceFullName"),
        )

    @staticmethod
    def _shape_name(ref: Any) -> str | None:
        if isinstance(ref, dict):
            return ref.get("shape")
        return None

    @staticmethod
    def _structure(
        operation_name: str,
        shape_name: str,
        structures: dict[str, StructureAttributes],
        fields: dict[str, FieldConstraint],
    ) -> StructureAttributes:
        if shape_name in structures:
            return structures[shape_name]
        if shape_name in fields:
            raise ModelConsistencyError(f"Operation '{operation_name}' references shape '{shape_name}' which is not a structure")
        raise ModelConsistencyError(f"Operation '{operation_name}' references undeclared shape '{shape_name}'")

    @staticmethod
    def _add_result_wrapper(
        operation_name: str,
        output_name: str,
        result_wrapper: str,
        structure_descriptions: dict[str, StructureDescription],
        fields: dict[str, FieldConstraint],
    ) -> str:
        wrapper_name = f"{output_name}For{operation_name}"
        if wrapper_name in structure_descriptions or wrapper_name in fields:
            raise ModelConsistencyError(
                f"Result wrapper '{wrapper_name}' for operation '{operation_name}' collides with a declared shape"
            )
        structure_descriptions[wrapper_name] = StructureDescription(
            members=frozen_mapping({result_wrapper: Member(value=output_name, position=0, required=True)}),
        )
        logger.debug("Synthesized result wrapper %s", wrapper_name)
        return wrapper_name

    @staticmethod
    def _error_status(attributes: StructureAttributes | None) -> int:
        if attributes is not None and attributes.error_attributes is not None:
            if attributes.error_attributes.http_status_code is not None:
                return attributes.error_attributes.http_status_code
        return DEFAULT_ERROR_STATUS
