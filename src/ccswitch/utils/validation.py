# ABOUTME: Validation utilities for MCP server definitions
# ABOUTME: Errors block a save, warnings are only logged
import shutil
from dataclasses import dataclass
from urllib.parse import urlparse

from ccswitch.models import McpServer


@dataclass(frozen=True)
class ValidationError:
    """Represents a validation error or warning.

    ABOUTME: Uses frozen dataclass for immutability
    ABOUTME: Severity level distinguishes between blocking errors and warnings
    """
    server_name: str
    message: str
    severity: str  # 'error' or 'warning'


def validate_command_exists(command: str) -> ValidationError | None:
    """Check that a stdio command is on PATH.

    ABOUTME: Only a warning, the CLI tool may run with a different PATH than this server
    """
    if shutil.which(command) is None:
        return ValidationError(
            server_name="",
            message=f"Command not found on PATH: {command}",
            severity="warning"
        )
    return None


def validate_url(url: str) -> ValidationError | None:
    """Validate that a URL is properly formatted.

    ABOUTME: Requires HTTP or HTTPS scheme and a host
    ABOUTME: Returns None if URL valid, ValidationError otherwise
    """
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        return ValidationError(
            server_name="",
            message=f"URL must use HTTP or HTTPS scheme: {url}",
            severity="error"
        )
    if not parsed.netloc:
        return ValidationError(
            server_name="",
            message=f"URL missing host/domain: {url}",
            severity="error"
        )
    return None


def validate_mcp_server(server: McpServer) -> list[ValidationError]:
    """Validate an MCP server definition.

    ABOUTME: stdio: warns when the command is not on PATH
    ABOUTME: http: errors on a malformed URL

    Args:
        server: McpServer to validate

    Returns:
        List of ValidationError instances (empty if valid)
    """
    issues: list[ValidationError] = []
    spec = server.server

    if spec.type == "stdio" and spec.command:
        cmd_issue = validate_command_exists(spec.command)
        if cmd_issue:
            issues.append(ValidationError(
                server_name=server.name,
                message=cmd_issue.message,
                severity=cmd_issue.severity
            ))
    elif spec.type == "http" and spec.url:
        url_issue = validate_url(spec.url)
        if url_issue:
            issues.append(ValidationError(
                server_name=server.name,
                message=url_issue.message,
                severity=url_issue.severity
            ))

    return issues
