"""String post-processing of LLM output: Babel repairs and multi-file splitting.

``repair`` is a fixed sequence of regex substitutions that make TypeScript
emitted by the model loadable by an in-browser Babel preview. It is not a
parser: nested generics such as ``useState<Array<string>>(`` are left
untouched, and it is not idempotent (``"export export const a = 1;"`` needs
two passes to lose both keywords).
"""
import logging
import posixpath
import re
from typing import Dict, List
from orus_builder.generators.codegen.types import ComponentMetadata, GeneratedComponent
from orus_builder.generators.codegen.utils import calculate_complexity, count_lines, extract_dependencies

log = logging.getLogger(__name__)

HOOK_GENERIC_RE = re.compile(r"\b(useState|useEffect|useMemo|useCallback|useRef|useContext|useReducer)<[^>]+>\(")
EXPORT_TYPE_RE = re.compile(r"export\s+(interface|type|enum)\s+")
EXPORT_DECL_RE = re.compile(r"export\s+(const|let|var|function)\s+")
EXPORT_DEFAULT_RE = re.compile(r"export\s+default\s+")
TYPE_ASSERTION_RE = re.compile(r"\s+as\s+[A-Z][a-zA-Z0-9<>\[\]|&\s]+(?=[,;\)\]\}])")
CATCH_ANNOTATION_RE = re.compile(r"catch\s*\((\w+)\s*:\s*\w+\)")

FILE_MARKER_RE = re.compile(r"^//\s*([a-zA-Z0-9_\-/.]+\.(ts|tsx|js|jsx|json|css|md))\s*$", re.MULTILINE)
FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*$", re.MULTILINE)

ROOT_FILES = {"package.json", "tsconfig.json", "vite.config.ts", "README.md", "tailwind.config.js", "postcss.config.js"}


def _keep_last_export_default(code: str) -> str:
    matches = list(EXPORT_DEFAULT_RE.finditer(code))
    if len(matches) < 2:
        return code
    # drop the keyword pair from every match but the last, back to front
    for m in reversed(matches[:-1]):
        code = code[:m.start()] + code[m.end():]
    return code


def repair(code: str) -> str:
    fixed = HOOK_GENERIC_RE.sub(r"\1(", code)
    fixed = EXPORT_TYPE_RE.sub(r"\1 ", fixed)
    fixed = EXPORT_DECL_RE.sub(r"\1 ", fixed)
    fixed = _keep_last_export_default(fixed)
    fixed = TYPE_ASSERTION_RE.sub("", fixed)
    fixed = CATCH_ANNOTATION_RE.sub(r"catch (\1)", fixed)
    if fixed != code:
        log.debug("Applied Babel compatibility repairs")
    return fixed


def normalize_path(path: str) -> str:
    """Clean a model-supplied path into a relative POSIX path.

    Parent references the model may emit are dropped, so the result
    always stays inside the project root.
    """
    path = path.strip().replace("\\", "/")
    path = posixpath.normpath(path)
    path = "/".join(part for part in path.split("/") if part not in ("", ".", ".."))
    if path.startswith("src/backend/"):
        path = "backend/src/" + path[len("src/backend/"):]
    return path


def classify_file(filename: str) -> str:
    lower = filename.lower()
    if "server" in lower or "routes" in lower:
        return "service"
    if "model" in lower or "interface" in lower:
        return "model"
    return "component"


def _default_location(filename: str, type: str) -> str:
    if filename in ROOT_FILES:
        return filename
    folder = {"service": "src/services", "model": "src/models"}.get(type, "src/components")
    return f"{folder}/{filename}"


def split_multi_file(text: str, fallback_name: str) -> List[GeneratedComponent]:
    """Split one response into files using ``// path/file.ext`` marker lines.

    Returns an empty list when the text carries no markers. Segments that
    are blank once code fences are removed are skipped.
    """
    markers = list(FILE_MARKER_RE.finditer(text))
    if not markers:
        return []

    files = []
    for i, marker in enumerate(markers):
        end = markers[i + 1].start() if i + 1 < len(markers) else len(text)
        content = FENCE_RE.sub("", text[marker.end():end]).strip()
        if not content:
            log.warning("Skipping empty file segment %s", marker.group(1))
            continue

        raw_path = normalize_path(marker.group(1))
        filename = posixpath.basename(raw_path)
        stem = filename.rsplit(".", 1)[0]
        file_type = classify_file(filename)
        path = raw_path if "/" in raw_path else _default_location(filename, file_type)

        files.append(GeneratedComponent(
            id=f"{fallback_name}-{stem}",
            name=stem,
            type=file_type,
            path=path,
            code=content,
            dependencies=extract_dependencies(content),
            metadata=ComponentMetadata(
                lines_of_code=count_lines(content),
                complexity=calculate_complexity(content),
            ),
        ))

    log.info("Split response into %d files", len(files))
    return files


def normalize_file_paths(components: List[GeneratedComponent]) -> List[GeneratedComponent]:
    for component in components:
        component.path = normalize_path(component.path)
    return components


def deduplicate_files(components: List[GeneratedComponent]) -> List[GeneratedComponent]:
    """Keep one record per path; a later record replaces an earlier one in place."""
    by_path: Dict[str, GeneratedComponent] = {}
    for component in components:
        by_path[component.path] = component
    return list(by_path.values())
