"""
Main Application

Command-line entry point and orchestration for creating Intune custom roles
from permission input files.
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from .core import GraphAuth, ConfigManager, setup_logging, disable_ssl_warnings
from .core.exceptions import ConfigurationError, RoleManagerError
from .core.protocols import AuthProvider, ConfigProvider, RoleServiceProvider
from .core.utils import validate_delimiter, validate_display_name
from .graph import GraphRoleClient
from .provisioner import ProvisionResult, RoleProvisioner

logger = logging.getLogger(__name__)


class IntuneRoleManager:
    """Main application orchestrator for the Intune Role Manager tool"""

    def __init__(
        self,
        auth_provider: Optional[AuthProvider] = None,
        config_provider: Optional[ConfigProvider] = None,
        role_service: Optional[RoleServiceProvider] = None,
        skip_tls: bool = False,
        debug: bool = False
    ):
        """
        Initialize the manager with dependency injection

        Args:
            auth_provider: Authentication provider (defaults to GraphAuth, built by configure_authentication)
            config_provider: Configuration provider (defaults to ConfigManager)
            role_service: Role service client (defaults to GraphRoleClient, built by configure_authentication)
            skip_tls: Whether to skip TLS verification
            debug: Enable debug logging
        """
        self.skip_tls = skip_tls
        self.debug = debug

        setup_logging(debug)

        if skip_tls:
            disable_ssl_warnings()

        self.config_manager = config_provider or ConfigManager()
        self.auth = auth_provider
        self.role_service = role_service

    def load_config(self, config_path: str) -> Dict[str, Any]:
        """
        Load configuration from file

        Args:
            config_path: Path to configuration file

        Returns:
            Dict containing configuration data
        """
        return self.config_manager.load_config(config_path)

    def generate_config(self, output_dir: str = None) -> str:
        """
        Generate configuration template

        Args:
            output_dir: Directory to save template (optional)

        Returns:
            str: Path to generated template file
        """
        return self.config_manager.generate_config_template(output_dir)

    def configure_authentication(self, access_token: str = None, tenant_id: str = None,
                                 client_id: str = None) -> None:
        """
        Build the Graph auth provider and role client unless they were injected

        Command-line values win over environment variables, which win over
        the configuration file.

        Args:
            access_token: Pre-issued bearer token (optional)
            tenant_id: Azure AD tenant ID (optional)
            client_id: App registration client ID (optional)
        """
        setting = self.config_manager.get_setting
        timeout = setting('graph.timeout')

        if self.auth is None:
            self.auth = GraphAuth.from_environment(
                access_token=access_token,
                tenant_id=tenant_id,
                client_id=client_id,
                authority=setting('graph.authority'),
                skip_tls=self.skip_tls,
                timeout=timeout,
            )
            # Environment wins over config; only fill what is still unset
            self.auth.tenant_id = self.auth.tenant_id or setting('graph.tenant_id') or None
            self.auth.client_id = self.auth.client_id or setting('graph.client_id') or None

        if self.role_service is None:
            self.role_service = GraphRoleClient(
                auth=self.auth,
                base_url=setting('graph.base_url'),
                api_version=setting('graph.api_version'),
                timeout=timeout,
                skip_tls=self.skip_tls,
            )
        logger.debug("Configured Microsoft Graph authentication and role client")

    def _create_provisioner(self, prefix: str = None, delimiter: str = None) -> RoleProvisioner:
        setting = self.config_manager.get_setting
        if delimiter is not None:
            validate_delimiter(delimiter)
        return RoleProvisioner(
            auth_provider=self.auth,
            role_service=self.role_service,
            prefix=prefix or setting('role.prefix'),
            delimiter=delimiter or setting('role.delimiter'),
        )

    def preview_role(self, file_path: str, display_name: str, description: str,
                     input_format: str = None, prefix: str = None, delimiter: str = None) -> int:
        """
        Build the role definition payload and print it without contacting the service

        Returns:
            int: Exit code (0 for success, 1 for error)
        """
        try:
            validate_display_name(display_name)
            provisioner = self._create_provisioner(prefix, delimiter)
            request = provisioner.build_request(file_path, display_name, description, input_format)
            self._print_json_output(request.to_graph_payload())
            return 0
        except RoleManagerError as e:
            logger.error(f"Failed to build role definition: {e}")
            print(f"Error: {e}", file=sys.stderr)
            return 1

    def create_role(self, file_path: str, display_name: str, description: str, force: bool = False,
                    input_format: str = None, prefix: str = None, delimiter: str = None) -> int:
        """
        Create the role definition in Intune

        Returns:
            int: Exit code (0 for success, 1 for error)
        """
        try:
            validate_display_name(display_name)
            if self.auth is None or self.role_service is None:
                raise ConfigurationError("Authentication not configured. Configure authentication first.")

            provisioner = self._create_provisioner(prefix, delimiter)
            result = provisioner.provision(file_path, display_name, description,
                                           force=force, input_format=input_format)
            self._report_result(result)
            return 0
        except RoleManagerError as e:
            logger.error(f"Role creation aborted: {e}")
            print(f"Error: {e}", file=sys.stderr)
            return 1
        finally:
            close = getattr(self.role_service, 'close', None)
            if callable(close):
                close()

    def _report_result(self, result: ProvisionResult) -> None:
        """Print a short summary of a successful run"""
        if result.deleted is not None:
            print(f"Deleted existing role '{result.deleted.display_name}' (id: {result.deleted.id})")
        print(f"Created role '{result.role.display_name}' (id: {result.role.id}) "
              f"with {len(result.request.allowed_resource_actions)} allowed resource actions")

    def _print_json_output(self, data: Dict[str, Any]) -> None:
        """
        Print JSON output

        Args:
            data: Dictionary to output as JSON
        """
        print(json.dumps(data, indent=2, ensure_ascii=False))


def create_role_manager(skip_tls: bool = False, debug: bool = False,
                        config_provider: Optional[ConfigProvider] = None) -> IntuneRoleManager:
    """
    Factory function to create IntuneRoleManager with default dependencies

    Args:
        skip_tls: Whether to skip TLS verification
        debug: Enable debug logging
        config_provider: Already-loaded configuration (optional)

    Returns:
        IntuneRoleManager: Configured instance
    """
    return IntuneRoleManager(config_provider=config_provider, skip_tls=skip_tls, debug=debug)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser with subcommands using parent parsers"""

    # Common parser: arguments shared by ALL commands
    common_parser = argparse.ArgumentParser(add_help=False)
    common_parser.add_argument('--debug', action='store_true', help='Enable debug logging')

    # Auth parser: arguments for commands that talk to Microsoft Graph
    auth_parser = argparse.ArgumentParser(add_help=False)
    auth_parser.add_argument('--skip-tls', action='store_true', help='Skip TLS verification for insecure requests')
    auth_parser.add_argument('--access-token', help='Microsoft Graph bearer token (or set GRAPH_ACCESS_TOKEN)')
    auth_parser.add_argument('--tenant-id', help='Azure AD tenant ID for client credentials (or set AZURE_TENANT_ID)')
    auth_parser.add_argument('--client-id', help='App registration client ID (or set AZURE_CLIENT_ID)')

    parser = argparse.ArgumentParser(
        prog='intune-role-manager',
        description='Intune Role Manager - Create custom Intune RBAC roles from permission files',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  intune-role-manager create --file permissions.csv --name "Helpdesk Reader" --description "Read-only helpdesk"
  intune-role-manager create --file actions.txt --name "Helpdesk Reader" --description "..." --force
  intune-role-manager create --file permissions.csv --name "Helpdesk Reader" --description "..." --dry-run
  intune-role-manager generate-config --output ./config

Use --help with specific commands for detailed help.
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    create_parser = subparsers.add_parser(
        'create',
        parents=[common_parser, auth_parser],
        help='Create a custom role definition',
        description='Create an Intune custom role definition from a CSV or line-oriented permission file'
    )
    create_parser.add_argument('--file', dest='file_path', required=True,
                               help='Input file (.csv with ResourceAction,Allowed columns, or .txt with one action per line)')
    create_parser.add_argument('--name', dest='display_name', required=True, help='Role display name')
    create_parser.add_argument('--description', required=True, help='Role description')
    create_parser.add_argument('--force', action='store_true',
                               help='Delete an existing role with the same display name before creating')
    create_parser.add_argument('--dry-run', action='store_true',
                               help='Print the role definition payload without contacting Microsoft Graph')
    create_parser.add_argument('--format', dest='input_format', choices=['csv', 'lines'],
                               help='Input format (detected from the file extension by default)')
    create_parser.add_argument('--delimiter', help='Field delimiter for CSV input (default: ",")')
    create_parser.add_argument('--prefix', help='Provider prefix for resource actions (default: Microsoft.Intune)')
    create_parser.add_argument('--config', help='Configuration file path')

    config_parser = subparsers.add_parser(
        'generate-config',
        parents=[common_parser],
        help='Generate a configuration template',
        description='Generate a configuration template (stdout by default, use --output to save to file)'
    )
    config_parser.add_argument('--output', help='Output directory for the configuration file')

    return parser


def handle_create_command(args, role_manager: IntuneRoleManager) -> int:
    """Handle create command execution."""
    if args.dry_run:
        return role_manager.preview_role(
            file_path=args.file_path,
            display_name=args.display_name,
            description=args.description,
            input_format=args.input_format,
            prefix=args.prefix,
            delimiter=args.delimiter,
        )

    role_manager.configure_authentication(
        access_token=args.access_token,
        tenant_id=args.tenant_id,
        client_id=args.client_id,
    )

    return role_manager.create_role(
        file_path=args.file_path,
        display_name=args.display_name,
        description=args.description,
        force=args.force,
        input_format=args.input_format,
        prefix=args.prefix,
        delimiter=args.delimiter,
    )


def handle_generate_config_command(args, role_manager: IntuneRoleManager) -> int:
    """Handle generate-config command execution."""
    if args.output:
        config_file = role_manager.generate_config(args.output)
        print(f"Configuration template generated: {config_file}")
    else:
        print(role_manager.config_manager.get_config_template_content(), end='')
    return 0


# Command dispatcher mapping
COMMAND_HANDLERS = {
    'create': handle_create_command,
    'generate-config': handle_generate_config_command,
}


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config_manager = ConfigManager()
        if getattr(args, 'config', None):
            config_manager.load_config(args.config)

        skip_tls = getattr(args, 'skip_tls', False) or config_manager.get_setting('global.skip_tls')
        debug = args.debug or config_manager.get_setting('global.debug')

        role_manager = create_role_manager(skip_tls=skip_tls, debug=debug, config_provider=config_manager)

        handler = COMMAND_HANDLERS[args.command]
        return handler(args, role_manager)

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        return 130
    except RoleManagerError as e:
        logger.error(f"{e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
