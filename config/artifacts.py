"""
Contract artifact copying for the Polymath client.

Trims full build artifacts (build/contracts/<Name>.json) down to the fields the
client needs and writes them into the runtime artifact directory. When the
destination already holds an artifact compiled from the same source, only the
deployment tables are merged so addresses recorded for other networks survive.

Usage:
    from config.artifacts import copy_artifacts

    written = copy_artifacts(Path("build/contracts"), Path("config/artifacts"))
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from web3 import Web3

from poly_logging.logger_manager import setup_module_logger
from shared.constants import ARTIFACT_KEYS, PLATFORM_ARTIFACTS
from shared.errors import MissingArtifactError

_logger = setup_module_logger("artifacts", "artifacts.log", module_folder="CLI_Logs")


def hash_source(source: str | None) -> str:
    """keccak-256 of the Solidity source, as 0x-hex."""
    return Web3.to_hex(Web3.keccak(text=source or ""))


def trim_artifact(original: dict[str, Any]) -> dict[str, Any]:
    """Keep contractName/abi/networks/bytecode and add sourceHash."""
    trimmed = {key: original.get(key) for key in ARTIFACT_KEYS}
    trimmed["networks"] = trimmed["networks"] or {}
    trimmed["sourceHash"] = hash_source(original.get("source"))
    return trimmed


def copy_artifact(file_path: Path, dest_dir: Path) -> Path:
    """
    Copy one artifact into ``dest_dir``.

    Same sourceHash at the destination: merge ``networks`` (new entries win).
    Different hash, unreadable JSON or no destination file: overwrite.
    """
    if not file_path.is_file():
        raise MissingArtifactError(str(file_path))

    with open(file_path, "r") as f:
        new_json = trim_artifact(json.load(f))

    dest_dir.mkdir(parents=True, exist_ok=True)
    dest_path = dest_dir / file_path.name

    if dest_path.is_file():
        try:
            with open(dest_path, "r") as f:
                dest_json = json.load(f)
        except json.JSONDecodeError:
            _logger.warning("Replacing unreadable artifact %s", dest_path)
            dest_json = None

        if isinstance(dest_json, dict) and dest_json.get("sourceHash") == new_json["sourceHash"]:
            dest_json["networks"] = {**(dest_json.get("networks") or {}), **new_json["networks"]}
            _write_json(dest_path, dest_json)
            _logger.info("Merged deployments into %s", dest_path)
            return dest_path

    _write_json(dest_path, new_json)
    _logger.info("Wrote %s", dest_path)
    return dest_path


def copy_artifacts(
    build_dir: Path,
    dest_dir: Path,
    names: Iterable[str] = PLATFORM_ARTIFACTS,
) -> list[Path]:
    """Copy every named artifact; the first missing one raises MissingArtifactError."""
    written = []
    for name in names:
        written.append(copy_artifact(build_dir / f"{name}.json", dest_dir))
    return written


def _write_json(path: Path, data: dict[str, Any]) -> None:
    with open(path, "w") as f:
        json.dump(data, f, indent=2)
