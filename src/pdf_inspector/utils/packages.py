#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/utils/packages.py
"""Check installed distributions against requirement strings."""

from __future__ import annotations

from importlib import metadata
from typing import NamedTuple, Optional

from packaging.requirements import Requirement
from packaging.specifiers import SpecifierSet


class RequirementStatus(NamedTuple):
    """An installed distribution compared with a requirement."""

    name: str
    specifier: SpecifierSet
    installed: Optional[str]

    @property
    def satisfied(self) -> bool:
        if self.installed is None:
            return False
        return self.specifier.contains(self.installed, prereleases=True)


def check_requirement(requirement: str) -> RequirementStatus:
    """Look up the distribution named by ``requirement`` (``"pymupdf>=1.26.4"``).

    The distribution name is the one on the package index, which can differ
    from the import name (``pymupdf`` installs ``fitz``).
    """
    parsed = Requirement(requirement)
    try:
        installed = metadata.version(parsed.name)
    except metadata.PackageNotFoundError:
        installed = None
    return RequirementStatus(parsed.name, parsed.specifier, installed)
