import logging
from pathlib import Path

from home_services.descriptor import parse_descriptor
from home_services.errors import ConfigDirectoryError
from home_services.models import ParseFailure, Registry, ServiceRecord

_LOGGER = logging.getLogger(__name__)


def ensure_config_dir(path: Path) -> bool:
    """
    Create the configuration directory if it does not exist yet.

    Only the directory itself is created, never its parents.

    :param Path path: The configuration directory.
    :raises ConfigDirectoryError: If the directory is missing and cannot be
        created.
    :return bool: True if the directory was created by this call.
    """
    if path.exists():
        return False

    try:
        path.mkdir()
    except FileExistsError:
        # Someone else created it between the check and the mkdir.
        return False
    except OSError as e:
        raise ConfigDirectoryError("creating config directory", e) from e

    _LOGGER.info("Created empty config directory `%s`", path)
    return True


def read_descriptor(path: Path) -> ServiceRecord | None:
    """
    Read and parse a single descriptor file.

    Problems are logged and reported as None so one bad file never stops
    the rest of the directory from loading.

    :param Path path: The descriptor file.
    :return ServiceRecord | None: The parsed record or None.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        _LOGGER.warning("Error reading `%s`: %s", path, e)
        return None

    result = parse_descriptor(text, source=str(path))
    if isinstance(result, ParseFailure):
        _LOGGER.warning("Failed to parse %s", result)
        _LOGGER.debug("bad descriptor `%s`:\n%s", path, text)
        return None

    return result


def load_registry(path: Path) -> Registry:
    """
    Load every descriptor in the configuration directory.

    This never raises: a directory that cannot be listed gives an empty
    registry, and files that cannot be read or parsed are left out. Entries
    that are not regular files are skipped silently.

    :param Path path: The configuration directory.
    :return Registry: The successfully parsed services, ordered by file name.
    """
    registry = Registry()

    try:
        entries = sorted(path.iterdir())
    except OSError as e:
        _LOGGER.warning("read dir failed for `%s`: %s", path, e)
        return registry

    for entry in entries:
        if not entry.is_file():
            continue
        service = read_descriptor(entry)
        if service is not None:
            registry.services.append(service)

    _LOGGER.debug("Loaded %d service(s) from `%s`", len(registry), path)
    return registry


def read_config(path: Path) -> Registry:
    """
    Build the registry for one page load.

    :param Path path: The configuration directory.
    :raises ConfigDirectoryError: If the directory is missing and cannot be
        created.
    :return Registry: The services to render.
    """
    if ensure_config_dir(path):
        return Registry()
    return load_registry(path)
