"""
Artifact loader.

Turns a compiled artifact reference into a live ComputationModule. An
artifact is a Python source file exporting ``create_module()``; references
are local paths or http(s) URLs, which are downloaded into a cache
directory first.
"""

import importlib.util
import socket
import traceback
from pathlib import Path
from typing import Union
from urllib.error import HTTPError, URLError
from urllib.parse import urlparse
from urllib.request import Request, urlopen

import structlog

from ..errors import LoadFailedError
from .contract import ComputationModule

logger = structlog.get_logger(__name__)

ENTRY_POINT = "create_module"


def describe_exception(exc: BaseException) -> str:
    """Single-block diagnostic text for an exception."""
    return "".join(traceback.format_exception_only(type(exc), exc)).strip()


class ArtifactLoader:
    """Instantiates modules from artifact references."""

    def __init__(self, cache_dir: Union[str, Path] = "artifacts", download_timeout_seconds: float = 10.0):
        self.cache_dir = Path(cache_dir)
        self.download_timeout_seconds = download_timeout_seconds
        self.logger = logger

    def instantiate(self, artifact_ref: str, generation: int = 0) -> ComputationModule:
        """
        Import an artifact and build its module.

        Raises:
            LoadFailedError: artifact missing or malformed, or the import
                contract (a callable ``create_module`` returning a module
                with ``evaluate``) is not met.
        """
        path = self._resolve(artifact_ref)
        module_name = f"swapbot_mod_{generation}_{path.stem}"

        try:
            spec = importlib.util.spec_from_file_location(module_name, path)
            if spec is None or spec.loader is None:
                raise LoadFailedError(
                    f"Artifact is not an importable module: {artifact_ref}",
                    diagnostic=f"no import spec for {path}",
                    artifact_ref=artifact_ref,
                )
            artifact = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(artifact)
        except LoadFailedError:
            raise
        except Exception as e:
            raise LoadFailedError(
                f"Artifact failed to import: {artifact_ref}",
                diagnostic=describe_exception(e),
                artifact_ref=artifact_ref,
            ) from e

        factory = getattr(artifact, ENTRY_POINT, None)
        if not callable(factory):
            raise LoadFailedError(
                f"Artifact does not export {ENTRY_POINT}()",
                diagnostic=f"missing callable '{ENTRY_POINT}' in {path.name}",
                artifact_ref=artifact_ref,
            )

        try:
            module = factory()
        except Exception as e:
            raise LoadFailedError(
                f"{ENTRY_POINT}() raised during instantiation",
                diagnostic=describe_exception(e),
                artifact_ref=artifact_ref,
            ) from e

        if not isinstance(module, ComputationModule) and not callable(getattr(module, "evaluate", None)):
            raise LoadFailedError(
                f"{ENTRY_POINT}() returned an object without evaluate()",
                diagnostic=f"got {type(module).__name__}",
                artifact_ref=artifact_ref,
            )

        self.logger.info(
            "Instantiated module from artifact",
            artifact_ref=artifact_ref,
            module_name=module_name,
            module_type=type(module).__name__,
        )
        return module

    def _resolve(self, artifact_ref: str) -> Path:
        """Local path for an artifact reference, downloading URLs."""
        if not artifact_ref or not artifact_ref.strip():
            raise LoadFailedError("Empty artifact reference", diagnostic="empty artifact reference")

        parsed = urlparse(artifact_ref)
        if parsed.scheme in ("http", "https"):
            return self._download(artifact_ref, parsed.path)

        path = Path(artifact_ref)
        if not path.is_file():
            raise LoadFailedError(
                f"Artifact not found: {artifact_ref}",
                diagnostic=f"no such file: {artifact_ref}",
                artifact_ref=artifact_ref,
            )
        return path

    def _download(self, url: str, url_path: str) -> Path:
        name = Path(url_path).name or "artifact.py"
        target = self.cache_dir / name

        try:
            req = Request(url, headers={"User-Agent": "swapbot/1.0"})
            with urlopen(req, timeout=self.download_timeout_seconds) as response:
                body = response.read()
        except HTTPError as e:
            raise LoadFailedError(
                f"Artifact download failed: {url}",
                diagnostic=f"HTTP {e.code}: {e.reason}",
                artifact_ref=url,
            ) from e
        except (OSError, URLError, socket.timeout) as e:
            raise LoadFailedError(
                f"Artifact download failed: {url}",
                diagnostic=f"Network error: {e}",
                artifact_ref=url,
            ) from e

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        target.write_bytes(body)
        self.logger.debug("Downloaded artifact", url=url, path=str(target), size=len(body))
        return target
