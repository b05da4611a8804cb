# fasttext_facade/infrastructure/bundled_model.py

import os
import shutil
import tempfile
from importlib.resources import files
from importlib.resources.abc import Traversable
from pathlib import Path

from fasttext_facade.domain.errors import ResourceExtractionError


# Language identification model shipped with the package (176 languages,
# quantized). Loaded by FastTextFacade.load_bundled_default().
DEFAULT_MODEL_RESOURCE = "lid.176.ftz"


def bundled_resource(resource_name: str) -> Traversable:
    return files("fasttext_facade") / "resources" / resource_name


def materialize_bundled_model(resource_name: str = DEFAULT_MODEL_RESOURCE) -> str:
    """
    Copy a packaged model into a private temp file and return its path.

    The file is created by mkstemp, so only the owner can read or write it.
    Deleting it afterwards is the caller's job.
    """
    resource = bundled_resource(resource_name)
    if not resource.is_file():
        raise ResourceExtractionError(
            f"Bundled model '{resource_name}' is not packaged with this installation."
        )

    stem, suffix = os.path.splitext(resource_name)
    try:
        fd, temp_path = tempfile.mkstemp(prefix=f"{stem}.", suffix=suffix)
    except OSError as error:
        raise ResourceExtractionError(
            f"Could not create a temp file for '{resource_name}': {error}"
        ) from error

    try:
        with os.fdopen(fd, "wb") as target, resource.open("rb") as source:
            shutil.copyfileobj(source, target)
    except OSError as error:
        Path(temp_path).unlink(missing_ok=True)
        raise ResourceExtractionError(
            f"Could not extract '{resource_name}' to '{temp_path}': {error}"
        ) from error

    print(f"[BundledModel] Extracted '{resource_name}' to '{temp_path}'.")
    return temp_path
