"""Edit command implementation.

Applies filesystem edits to one block device of a graph file through a
FilesystemController session, then writes the resulting graph.
"""

from pathlib import Path
from typing import Annotated

import typer

from partctl.cli.commands.common import require_blk_device, write_graphs
from partctl.controller import ControllerSession, FilesystemController
from partctl.core.graphfile import require_graphs
from partctl.core.product import ProductConfig, ProductConfigError, load_product_config
from partctl.models.types import FilesystemType, MountByType, PartitionId, Role
from partctl.utils.formatting import print_error, print_info, print_success, print_warning


def edit_device(
    file: Annotated[
        Path,
        typer.Argument(help="Graph file to edit."),
    ],
    device: Annotated[
        str,
        typer.Argument(help="Name of the block device to edit (e.g., /dev/sda1)."),
    ],
    role: Annotated[
        Role | None,
        typer.Option(
            "--role",
            "-r",
            help="Apply the canonical settings of a role.",
            case_sensitive=False,
        ),
    ] = None,
    fs_type: Annotated[
        FilesystemType | None,
        typer.Option(
            "--fs",
            "-f",
            help="Format with a new filesystem.",
            case_sensitive=False,
        ),
    ] = None,
    mount_point: Annotated[
        str | None,
        typer.Option("--mount", "-m", help="Mount point; an empty value unmounts."),
    ] = None,
    label: Annotated[
        str | None,
        typer.Option("--label", "-l", help="Filesystem label."),
    ] = None,
    mount_by: Annotated[
        MountByType | None,
        typer.Option(
            "--mount-by",
            help="How the filesystem is referenced in fstab.",
            case_sensitive=False,
        ),
    ] = None,
    partition_id: Annotated[
        PartitionId | None,
        typer.Option(
            "--partition-id",
            help="Partition id.",
            case_sensitive=False,
        ),
    ] = None,
    encrypt: Annotated[
        bool | None,
        typer.Option("--encrypt/--no-encrypt", help="Add or remove the encryption layer."),
    ] = None,
    password: Annotated[
        str | None,
        typer.Option("--password", help="Password for a new encryption layer."),
    ] = None,
    revert: Annotated[
        bool,
        typer.Option("--revert", help="Undo the formatting done by this edit."),
    ] = False,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the result here instead of FILE."),
    ] = None,
) -> None:
    """Edit the filesystem configuration of a block device.

    Options are applied in this order: role, filesystem, mount point,
    label, mount-by, partition id, revert, encryption.
    """
    graphs = require_graphs(file)
    blk_device = require_blk_device(graphs, device)
    product = _require_product_config()

    session = ControllerSession.start(graphs, blk_device)
    controller = FilesystemController(graphs, session, product)

    if role is not None:
        controller.apply_role(role)
    if fs_type is not None:
        controller.new_filesystem(fs_type)
    if mount_point is not None:
        controller.set_mount_point(mount_point or None)
    if label is not None:
        controller.set_label(label)
    if mount_by is not None:
        controller.set_mount_by(mount_by)
    if partition_id is not None:
        controller.set_partition_id(partition_id)
    if revert:
        controller.revert_to_no_format()
    if encrypt is not None:
        _apply_encryption(controller, encrypt, password)

    if controller.filesystem is None and (mount_point or label or mount_by):
        print_warning(f"{device} holds no filesystem; filesystem options were ignored.")

    target = write_graphs(graphs, output or file)
    print_success(f"Updated {device} in {target}")


# === Private helper functions ===


def _require_product_config() -> ProductConfig:
    """Load the product configuration or exit with an error."""
    try:
        return load_product_config()
    except ProductConfigError as e:
        print_error(f"Invalid product configuration: {e}")
        raise typer.Exit(code=1) from e


def _apply_encryption(
    controller: FilesystemController,
    encrypt: bool,
    password: str | None,
) -> None:
    """Set the encryption request on the session and finalize it."""
    session = controller.session
    was_encrypted = controller.graph.is_encrypted(controller.blk_device)

    session.encrypt = encrypt
    if password:
        session.encrypt_password = password
    controller.finalize_encryption()

    is_encrypted = controller.graph.is_encrypted(controller.blk_device)
    if is_encrypted == encrypt:
        if is_encrypted != was_encrypted:
            action = "added to" if encrypt else "removed from"
            print_info(f"Encryption {action} {controller.blk_device.name}")
        return

    if encrypt and not session.encrypt_password:
        print_warning("Encryption requested without --password; not encrypted.")
    else:
        print_warning("Encryption of an existing filesystem cannot change.")
