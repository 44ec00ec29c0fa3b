from pinoc_core.addresses import AddressResolver, KeyPair
from pinoc_core.clean import CleanResult, clean
from pinoc_core.console import Console
from pinoc_core.errors import (
    ConfigurationError,
    FileSystemError,
    MissingArtifactError,
    MissingToolError,
    PinocError,
    ToolInvocationError,
    ValidationError,
)
from pinoc_core.keys import IdentityState, SyncReport, list_keypairs, sync_program_id
from pinoc_core.scaffold import CreatedProject, ProjectSpec, create_project, validate_project_name
from pinoc_core.search import SearchResult, parse_search_output, search_packages
from pinoc_core.templates import render
from pinoc_core.tool_invoker import CommandResult, ToolInvoker

__all__ = [
    "AddressResolver",
    "CleanResult",
    "CommandResult",
    "ConfigurationError",
    "Console",
    "CreatedProject",
    "FileSystemError",
    "IdentityState",
    "KeyPair",
    "MissingArtifactError",
    "MissingToolError",
    "PinocError",
    "ProjectSpec",
    "SearchResult",
    "SyncReport",
    "ToolInvocationError",
    "ToolInvoker",
    "ValidationError",
    "clean",
    "create_project",
    "list_keypairs",
    "parse_search_output",
    "render",
    "search_packages",
    "sync_program_id",
    "validate_project_name",
]
