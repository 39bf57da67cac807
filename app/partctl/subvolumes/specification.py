"""Specifications of the btrfs subvolumes proposed for a root filesystem.

The product configuration may list its own subvolumes; when it does not,
the built-in fallback list is used.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SubvolSpecification(BaseModel):
    """Specification of a proposed btrfs subvolume.

    Attributes:
        path: Subvolume path, relative to the default subvolume (e.g., "var").
        copy_on_write: Whether copy-on-write stays enabled.
        archs: Architectures the subvolume is meant for. Entries starting
            with "!" exclude an architecture. None means every architecture.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    path: Annotated[str, Field(min_length=1, description="Subvolume path")]
    copy_on_write: Annotated[bool, Field(description="Keep copy-on-write enabled")] = True
    archs: Annotated[
        tuple[str, ...] | None,
        Field(description="Architectures the subvolume applies to"),
    ] = None

    @field_validator("path")
    @classmethod
    def strip_slashes(cls, v: str) -> str:
        """Store paths without leading or trailing slashes."""
        path = v.strip("/")
        if not path:
            msg = "Subvolume path cannot be '/'"
            raise ValueError(msg)
        return path

    def applies_to(self, arch: str) -> bool:
        """Check whether the subvolume is meant for the given architecture.

        Args:
            arch: Machine architecture (e.g., "x86_64", "s390x").

        Returns:
            True if no architecture list is set, or if ``arch`` matches one
            of the listed architectures and none of the excluded ones.
        """
        if not self.archs:
            return True

        wanted = [a for a in self.archs if not a.startswith("!")]
        excluded = [a[1:] for a in self.archs if a.startswith("!")]

        if any(_arch_matches(arch, a) for a in excluded):
            return False
        return not wanted or any(_arch_matches(arch, a) for a in wanted)


def _arch_matches(arch: str, pattern: str) -> bool:
    # "ppc" covers ppc64/ppc64le, "s390" covers s390x
    return arch == pattern or arch.startswith(pattern)


def fallback_list() -> list[SubvolSpecification]:
    """Return the subvolumes proposed when the product does not define any."""
    return [
        SubvolSpecification(path="home"),
        SubvolSpecification(path="opt"),
        SubvolSpecification(path="root"),
        SubvolSpecification(path="srv"),
        SubvolSpecification(path="tmp"),
        SubvolSpecification(path="usr/local"),
        SubvolSpecification(path="var", copy_on_write=False),
        SubvolSpecification(path="boot/grub2/i386-pc", archs=("i386", "x86_64")),
        SubvolSpecification(path="boot/grub2/x86_64-efi", archs=("x86_64",)),
        SubvolSpecification(path="boot/grub2/powerpc-ieee1275", archs=("ppc", "!board_powernv")),
        SubvolSpecification(path="boot/grub2/s390x-emu", archs=("s390",)),
        SubvolSpecification(path="boot/grub2/arm64-efi", archs=("aarch64",)),
    ]
