"""
Project descriptor inspection.

Deploy jobs report the version of the artifact they produced. The version is
read from the Maven project descriptor in the working directory.
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

PROJECT_DESCRIPTOR = "pom.xml"


def _local_name(tag: str) -> str:
    # Strip the "{namespace}" prefix ElementTree puts on qualified tags.
    return tag.rsplit("}", 1)[-1]


def _child_text(element: ET.Element, name: str) -> Optional[str]:
    for child in element:
        if _local_name(child.tag) == name and child.text and child.text.strip():
            return child.text.strip()
    return None


def resolve_artifact_version(project_dir: Union[str, Path]) -> Optional[str]:
    """Read the artifact version from the project's pom.xml.

    Uses the project's own ``<version>``, falling back to the version of the
    ``<parent>`` it inherits from.

    Args:
        project_dir: Directory holding the project descriptor.

    Returns:
        The version string, or None if the descriptor is missing, malformed,
        or declares no version.
    """
    descriptor = Path(project_dir) / PROJECT_DESCRIPTOR
    if not descriptor.is_file():
        logger.debug(f"No project descriptor at {descriptor}")
        return None

    try:
        root = ET.parse(descriptor).getroot()
    except (ET.ParseError, OSError, LookupError, ValueError) as e:
        # LookupError: unknown declared encoding. ValueError: unsupported multi-byte encoding.
        logger.warning(f"Could not read project descriptor {descriptor}: {e}")
        return None

    version = _child_text(root, "version")
    if version is None:
        for child in root:
            if _local_name(child.tag) == "parent":
                version = _child_text(child, "version")
                break

    if version is None:
        logger.warning(f"Project descriptor {descriptor} declares no version")
    return version
