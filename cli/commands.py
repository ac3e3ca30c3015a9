"""Command handler functions for CLI operations."""

from pathlib import Path
from typing import Optional

from common.logging_config import get_logger
from cli.models import (
    ByHashCommand,
    ConnectCommand,
    CreateCommand,
    DeleteCommand,
    DetailsHashCommand,
    HashCommand,
    HistoryCommand,
    RangeCommand,
    ReadCommand,
    ReadDetailsCommand,
    TransferCommand,
)
from cli.config import Config
from cli.registry_client import RegistryClient

logger = get_logger(__name__)


_client: Optional[RegistryClient] = None


def get_client() -> RegistryClient:
    """
    Get or create global RegistryClient instance.

    Returns:
        RegistryClient instance
    """
    global _client
    if _client is None:
        logger.debug("Creating new RegistryClient instance")
        config = Config(Path.home() / '.folio' / 'config.json')
        _client = RegistryClient(config)
    return _client


def handle_create(cmd: CreateCommand, client: Optional[RegistryClient] = None) -> str:
    """
    Handle 'create' command.

    Args:
        cmd: CreateCommand with the shared fields and the folio
        client: Optional RegistryClient for dependency injection (testing)

    Returns:
        Success or error message
    """
    logger.info(f"Executing create command: name={cmd.name}")
    if client is None:
        client = get_client()
    return client.create_file(cmd.name, cmd.content_hash, cmd.timestamp, cmd.owner, cmd.folio)


def handle_read(cmd: ReadCommand, client: Optional[RegistryClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.read_file(cmd.name)


def handle_read_details(cmd: ReadDetailsCommand, client: Optional[RegistryClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.read_file_details(cmd.name)


def handle_transfer(cmd: TransferCommand, client: Optional[RegistryClient] = None) -> str:
    """
    Handle 'transfer' command.

    Args:
        cmd: TransferCommand with name and new owner
        client: Optional RegistryClient for dependency injection (testing)

    Returns:
        Success or error message
    """
    logger.info(f"Executing transfer command: name={cmd.name} owner={cmd.owner}")
    if client is None:
        client = get_client()
    return client.transfer_file(cmd.name, cmd.owner)


def handle_delete(cmd: DeleteCommand, client: Optional[RegistryClient] = None) -> str:
    logger.info(f"Executing delete command: name={cmd.name}")
    if client is None:
        client = get_client()
    return client.delete_file(cmd.name)


def handle_range(cmd: RangeCommand, client: Optional[RegistryClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.get_files_by_range(cmd.start_key, cmd.end_key)


def handle_by_hash(cmd: ByHashCommand, client: Optional[RegistryClient] = None) -> str:
    """
    Handle 'by-hash' command.

    Ranges over the hash~name index prefix only, so shared records in the
    partition are never part of the result.
    """
    if client is None:
        client = get_client()
    return client.get_files_by_hash(cmd.content_hash)


def handle_hash(cmd: HashCommand, client: Optional[RegistryClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.get_file_hash(cmd.name)


def handle_details_hash(cmd: DetailsHashCommand, client: Optional[RegistryClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.get_file_details_hash(cmd.name)


def handle_history(cmd: HistoryCommand, client: Optional[RegistryClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.history(cmd.limit)


def handle_connect(cmd: ConnectCommand, client: Optional[RegistryClient] = None) -> str:
    """
    Handle 'connect' command.

    Args:
        cmd: ConnectCommand with host and port
        client: Optional RegistryClient for dependency injection (testing)

    Returns:
        Confirmation message with the new base URL
    """
    if client is None:
        client = get_client()
    client.config.set_registry_address(cmd.host, cmd.port)
    client.reconnect()
    logger.info(f"Registry address changed [base_url={client.config.get_base_url()}]")
    return f"Connected to {client.config.get_base_url()}"
