"""
Installation of plugin artifacts into a SonarQube distribution.
"""

import errno
import logging
import os
from pathlib import Path
import shutil
import tempfile

from sonarqube_fixture.config import DISTRIBUTION_PATHS
from sonarqube_fixture.errors import ArtifactNotFoundError

logger = logging.getLogger(__name__)


def install_plugin(install_dir: str | Path, artifact: str | Path) -> None:
    """Copy a plugin artifact into the distribution's plugin directory.

    An existing file with the same name is replaced. The copy is written to a
    temporary file next to the destination and renamed over it once complete,
    so the destination name never refers to a partially written file.

    Args:
        install_dir: Root of the unpacked distribution
        artifact: Plugin file to install

    Raises:
        ArtifactNotFoundError: If the artifact does not exist
        FileNotFoundError: If the plugin directory does not exist
        OSError: If the copy fails
    """
    artifact = Path(artifact)
    if not artifact.is_file():
        raise ArtifactNotFoundError(errno.ENOENT, "Plugin artifact not found", str(artifact))

    plugins_dir = Path(install_dir) / DISTRIBUTION_PATHS["plugins"]
    if not plugins_dir.is_dir():
        raise FileNotFoundError(errno.ENOENT, "Plugin directory not found", str(plugins_dir))

    destination = plugins_dir / artifact.name
    fd, temp_path = tempfile.mkstemp(prefix=f".{artifact.name}.", suffix=".tmp", dir=plugins_dir)
    try:
        with os.fdopen(fd, "wb") as target, artifact.open("rb") as source:
            shutil.copyfileobj(source, target)
        os.replace(temp_path, destination)
    except BaseException:
        Path(temp_path).unlink(missing_ok=True)
        raise

    logger.info(f"Installed plugin {artifact.name} into {plugins_dir}")
