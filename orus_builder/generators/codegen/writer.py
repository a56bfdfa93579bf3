"""File and archive writers for generated projects."""
import io
import zipfile
from pathlib import Path, PurePosixPath
from typing import Dict, List
from orus_builder.generators.codegen.render import render_index_html, render_vite_config
from orus_builder.generators.codegen.types import GenerationResult


def project_files(result: GenerationResult) -> Dict[str, str]:
    """
    Collect every file of a generation, scaffolding included.

    Generated files win; package.json, vite.config.ts, README.md and
    index.html are added only when the generation did not produce them.

    Args:
        result: A stored GenerationResult

    Returns:
        Mapping of relative path to file content, in insertion order
    """
    files: Dict[str, str] = {}
    for component in result.components:
        files[component.path] = component.code
        if component.tests:
            stem, _, ext = component.path.rpartition(".")
            files[f"{stem}.test.{ext}"] = component.tests

    files.setdefault("package.json", result.package_json)
    files.setdefault("vite.config.ts", render_vite_config())
    files.setdefault("README.md", result.readme)
    files.setdefault("index.html", render_index_html(result.project_id))
    return files


def safe_relative_path(rel_path: str) -> PurePosixPath:
    """Reject paths that are absolute or climb out of the project root."""
    path = PurePosixPath(rel_path.replace("\\", "/"))
    if not rel_path or path.is_absolute() or ".." in path.parts:
        raise ValueError(f"Unsafe project path: {rel_path!r}")
    return path


def write_files(files: Dict[str, str], out_dir: Path) -> List[Path]:
    """
    Write generated files to the output directory.

    Args:
        files: Mapping of relative path to content
        out_dir: Base output directory path

    Returns:
        Paths written

    Raises:
        ValueError: If a path would land outside out_dir; nothing is written
    """
    root = out_dir.resolve()
    targets = []
    for rel_path, content in files.items():
        file_path = out_dir / safe_relative_path(rel_path)
        if root not in file_path.resolve().parents:
            raise ValueError(f"Unsafe project path: {rel_path!r}")
        targets.append((file_path, content))

    out_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for file_path, content in targets:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")
        written.append(file_path)
    return written


def build_zip(files: Dict[str, str]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        for rel_path, content in files.items():
            zf.writestr(str(safe_relative_path(rel_path)), content)
    return buf.getvalue()
