import logging
import subprocess
from typing import List

from monitor_server.models.errors import SourceError, SourceErrorKind
from monitor_server.models.status import ContainerStatus

logger = logging.getLogger(__name__)

# -a: auch gestoppte Container auflisten
_DOCKER_PS_CMD = ["docker", "ps", "-a", "--format", "{{.Image}}\t{{.State}}"]

# Markers in docker's stderr that mean the daemon is not reachable at all
_CONNECTION_MARKERS = (
    "Cannot connect to the Docker daemon",
    "permission denied while trying to connect",
    "error during connect",
)


def _parse_docker_ps(stdout: str) -> List[ContainerStatus]:
    containers: List[ContainerStatus] = []
    for line in stdout.splitlines():
        if not line.strip():
            continue
        image, _, state = line.partition("\t")
        containers.append(ContainerStatus(image=image.strip(), state=state.strip()))
    return containers


def get_containers(timeout_seconds: float = 5.0) -> List[ContainerStatus]:
    """
    List all containers known to the local Docker daemon, in daemon order.

    Raises SourceError with kind CONTAINER_CONNECTION if the docker CLI is
    missing or the daemon is unreachable, CONTAINER_LIST for any other
    failure while listing.
    """
    try:
        result = subprocess.run(
            _DOCKER_PS_CMD,
            check=False,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout_seconds,
        )
    except FileNotFoundError as exc:
        raise SourceError(
            SourceErrorKind.CONTAINER_CONNECTION, "docker binary not found on host system"
        ) from exc
    except UnicodeDecodeError as exc:
        raise SourceError(
            SourceErrorKind.CONTAINER_LIST, f"undecodable docker ps output: {exc}"
        ) from exc
    except subprocess.TimeoutExpired as exc:
        raise SourceError(
            SourceErrorKind.CONTAINER_LIST, f"docker ps timed out after {timeout_seconds}s"
        ) from exc

    if result.returncode != 0:
        stderr = result.stderr.strip()
        if any(marker in stderr for marker in _CONNECTION_MARKERS):
            raise SourceError(SourceErrorKind.CONTAINER_CONNECTION, stderr)
        raise SourceError(
            SourceErrorKind.CONTAINER_LIST,
            f"docker ps failed with return code {result.returncode}: {stderr}",
        )

    containers = _parse_docker_ps(result.stdout)
    logger.debug("Docker reported %d containers", len(containers))
    return containers
