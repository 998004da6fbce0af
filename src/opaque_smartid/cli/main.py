"""Main CLI entry point for opaque-smartid.

This module provides the main Click command group for the opaque-smartid CLI.
"""

import json
from pathlib import Path
from typing import Any, Optional

import click

from opaque_smartid import __version__
from opaque_smartid.config import load_config, load_secret_salt
from opaque_smartid.config.schema import Config
from opaque_smartid.identifier.filter import OpaqueSmartIDFilter
from opaque_smartid.identifier.hashing import digest as salted_digest
from opaque_smartid.logging_audit import configure_logging
from opaque_smartid.metadata.idp import InMemoryMetadataStore
from opaque_smartid.models.context import AuthenticationContext
from opaque_smartid.models.results import ProcessingResult, build_error_redirect
from opaque_smartid.processing import (
    PersistentNameIDToAttributeFilter,
    ProcessingFilter,
    RequiredAttributesFilter,
)
from opaque_smartid.utils.exceptions import SmartIDError, create_error_info

# Exit code when processing halted with an error report
EXIT_REPORT = 2


@click.group()
@click.version_option(version=__version__, prog_name="opaque-smartid")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: ./config/config.json)",
)
@click.option("--verbose", is_flag=True, help="Enable verbose logging (DEBUG level)")
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to log file (overrides config file)",
)
@click.option(
    "--redact-pii",
    is_flag=True,
    help="Redact personal identifiers (e.g. eduPersonPrincipalName) from logs",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: bool,
    log_file: Optional[Path],
    redact_pii: bool,
) -> None:
    """opaque-smartid - Opaque, salted user identifiers for federated login.

    Derives long-lived, non-reassignable user identifiers from the attributes
    an IdP releases. The secret salt is read from the environment variable
    named in the configuration (default: SMARTID_SECRET_SALT) or a .env file.

    Common usage:

        # Validate a configuration file
        opaque-smartid config validate config/config.json

        # Generate the identifier for a captured authentication context
        opaque-smartid generate context.json

        # Use custom configuration file
        opaque-smartid --config custom/config.json generate context.json

    Use --help with any command for more information.
    """
    ctx.ensure_object(dict)

    try:
        config_obj = load_config(config)
        ctx.obj["config"] = config_obj
    except SmartIDError as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        ctx.exit(1)

    ctx.obj["verbose"] = verbose
    ctx.obj["redact_pii"] = redact_pii
    ctx.obj["log_file"] = log_file

    # Precedence: CLI flags > config file > defaults
    log_level = "DEBUG" if verbose else config_obj.logging.level
    log_file_path = log_file if log_file else config_obj.logging.log_file
    redact_pii_setting = redact_pii if redact_pii else config_obj.logging.redact_pii

    configure_logging(
        level=log_level, log_file=log_file_path, redact_pii=redact_pii_setting
    )


@cli.group()
def config() -> None:
    """Configuration management commands."""
    pass


@config.command()
@click.argument("config_file", type=click.Path(exists=True, path_type=Path))
def validate(config_file: Path) -> None:
    """Validate a configuration file.

    Example:
        opaque-smartid config validate config/config.json
    """
    try:
        config_obj = load_config(config_file)
    except SmartIDError as e:
        click.echo(click.style("✗", fg="red", bold=True) + " Configuration validation failed")
        click.echo(f"\n{e}", err=True)
        raise click.exceptions.Exit(1)

    identifier = config_obj.identifier
    click.echo(click.style("✓", fg="green", bold=True) + " Configuration is valid")
    click.echo(f"\nConfiguration file: {config_file}")

    click.echo("\nIdentifier:")
    click.echo(f"  Attribute:     {identifier.id_attribute}")
    click.echo(f"  Candidates:    {', '.join(identifier.candidates)}")
    click.echo(f"  Overrides:     {len(identifier.authority_candidate_map)} authorit(y/ies)")
    click.echo(f"  Scope:         {identifier.scope or 'Not configured'}")
    click.echo(f"  Add authority: {identifier.add_authority}")
    click.echo(f"  Add candidate: {identifier.add_candidate}")
    if identifier.idp_tag_whitelist or identifier.idp_tag_blacklist:
        click.echo(f"  Tag whitelist: {', '.join(sorted(identifier.idp_tag_whitelist)) or '-'}")
        click.echo(f"  Tag blacklist: {', '.join(sorted(identifier.idp_tag_blacklist)) or '-'}")
        click.echo(f"  Copied attrs:  {', '.join(identifier.cuid_candidates)}")

    click.echo("\nSecrets:")
    click.echo(f"  Salt env var:  {config_obj.secrets.salt_env_var}")

    click.echo("\nLogging:")
    click.echo(f"  Level:         {config_obj.logging.level}")
    click.echo(f"  Log file:      {config_obj.logging.log_file}")
    click.echo(f"  Redact PII:    {config_obj.logging.redact_pii}")


@cli.command()
@click.argument("context_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--metadata",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="JSON file with IdP metadata, needed for bridged IdPs",
)
@click.option(
    "--persistent-nameid",
    is_flag=True,
    help="Copy a persistent NameID into an attribute before generating",
)
@click.option(
    "--require-attributes",
    is_flag=True,
    help="Halt if the configured required attributes are missing",
)
@click.option("--json", "as_json", is_flag=True, help="Print the full result as JSON")
@click.pass_context
def generate(
    ctx: click.Context,
    context_file: Path,
    metadata: Optional[Path],
    persistent_nameid: bool,
    require_attributes: bool,
    as_json: bool,
) -> None:
    """Generate the user identifier for an authentication context.

    CONTEXT_FILE is a JSON object with "attributes", "authority_chain",
    "source" and optionally "bridged_idp_entity_id", "name_id" and
    "return_url". Exits with code 2 when processing halts with an error
    report (NO_IDENTIFIER, MISSING_ATTRIBUTE).

    Example:
        opaque-smartid generate context.json --json
    """
    config_obj: Config = ctx.obj["config"]

    try:
        context = _load_context(context_file)
        store = InMemoryMetadataStore.from_json_file(metadata) if metadata else None
        salt = load_secret_salt(config_obj)
        base_url = config_obj.error_report.base_url

        chain: list[ProcessingFilter] = []
        if persistent_nameid:
            chain.append(PersistentNameIDToAttributeFilter(config_obj.persistent_nameid))
        if require_attributes:
            chain.append(
                RequiredAttributesFilter(
                    config_obj.required_attributes, metadata_store=store, base_url=base_url
                )
            )
        chain.append(
            OpaqueSmartIDFilter(
                config_obj.identifier, salt, metadata_store=store, base_url=base_url
            )
        )

        for processing_filter in chain:
            result = processing_filter.process(context)
            if not result.is_success:
                break
    except SmartIDError as e:
        error_info = create_error_info(e)
        click.echo(click.style("✗", fg="red", bold=True) + " Identifier generation failed")
        click.echo(f"\n{error_info.error_type}: {e}", err=True)
        click.echo(f"Fix: {error_info.remediation}", err=True)
        raise click.exceptions.Exit(1)

    if as_json:
        click.echo(json.dumps(_result_to_dict(result, context, config_obj), indent=2))
    elif result.is_success:
        click.echo(result.identifier)
    else:
        click.echo(f"{result.status.value}: identifier could not be generated", err=True)
        click.echo(json.dumps(result.error.to_dict(), indent=2), err=True)

    if not result.is_success:
        raise click.exceptions.Exit(EXIT_REPORT)


@cli.command()
@click.argument("preimage")
@click.option("--scope", default=None, help="Scope appended as @scope")
@click.pass_context
def digest(ctx: click.Context, preimage: str, scope: Optional[str]) -> None:
    """Print the salted digest of a known pre-image.

    PREIMAGE has the form [name:]value[!authority], as written to the logs
    under externalId. Useful for confirming which input produced an
    identifier without revealing the salt.

    Example:
        opaque-smartid digest 'eduPersonPrincipalName:alice@example.org!https://idp.example.org'
    """
    try:
        salt = load_secret_salt(ctx.obj["config"])
    except SmartIDError as e:
        click.echo(f"Error: {e}", err=True)
        raise click.exceptions.Exit(1)

    value = salted_digest(preimage, salt)
    click.echo(f"{value}@{scope}" if scope else value)


@cli.command()
def version() -> None:
    """Display version information."""
    click.echo(f"opaque-smartid version {__version__}")


def _load_context(path: Path) -> AuthenticationContext:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return AuthenticationContext.from_dict(data)
    except (OSError, ValueError, TypeError, AttributeError) as e:
        raise click.BadParameter(
            f"Cannot load authentication context from {path}: {e}",
            param_hint="CONTEXT_FILE",
        ) from e


def _result_to_dict(
    result: ProcessingResult, context: AuthenticationContext, config_obj: Config
) -> dict[str, Any]:
    output: dict[str, Any] = {
        "status": result.status.value,
        "identifier": result.identifier,
        "decision": result.decision.value if result.decision else None,
        "source_attribute": result.source_attribute,
        "user_id": context.user_id,
    }
    if result.error is not None:
        output["error"] = result.error.to_dict()
        output["redirect"] = build_error_redirect(
            result.error,
            config_obj.error_report.base_url,
            config_obj.error_report.error_path,
        )
    return output


if __name__ == "__main__":
    cli()
