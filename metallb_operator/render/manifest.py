"""
Parse the rendered manifest stream into individual objects
"""

# Standard
from typing import List

# Third Party
import yaml

# First Party
import alog

# Local
from ..exceptions import RenderError

log = alog.use_channel("MANIF")


def parse_manifest(manifest: str) -> List[dict]:
    """Split a multi-document YAML (or JSON) stream into objects

    A stream that is empty after trimming yields no objects. Documents that
    are empty (e.g. a template whose condition was false) are skipped. Any
    document that fails to parse or is not a kubernetes object aborts the
    whole parse.

    Args:
        manifest:  str
            The rendered stream

    Returns:
        objects:  List[dict]
            One dict per rendered object, in stream order
    """
    if not manifest.strip():
        log.debug("Empty manifest")
        return []

    try:
        documents = list(yaml.safe_load_all(manifest))
    except yaml.YAMLError as err:
        raise RenderError(f"failed to unmarshal manifest {manifest}: {err}") from err

    objects = []
    for document in documents:
        if document is None:
            continue
        if not isinstance(document, dict):
            raise RenderError(
                f"failed to unmarshal manifest {manifest}: document is not a mapping"
            )
        if not document.get("kind"):
            raise RenderError(
                f"failed to unmarshal manifest {manifest}: Object 'Kind' is missing"
            )
        objects.append(document)
    log.debug2("Parsed %d objects from manifest", len(objects))
    return objects
