"""
Client generation delegates.

Each delegate supplies the flavour-specific parts of one generated client.
"""

from __future__ import annotations

from .aws_client_delegate import APIGatewayClientDelegate, AWSClientDelegate
from .base import ClientFileType, ClientType, DelegateKind, InvokeType, ModelClientDelegate, create_delegate
from .errors_delegate import ModelErrorsDelegate
from .mock_client_delegate import MockClientDelegate
from .protocol_delegate import ClientProtocolDelegate

__all__ = [
    "ModelClientDelegate",
    "ClientFileType",
    "ClientType",
    "DelegateKind",
    "InvokeType",
    "create_delegate",
    "AWSClientDelegate",
    "APIGatewayClientDelegate",
    "MockClientDelegate",
    "ClientProtocolDelegate",
    "ModelErrorsDelegate",
]
