"""Utility functions for code generation."""
import re
from typing import List

COMPLEXITY_PATTERNS = [
    re.compile(r"if\s*\("),
    re.compile(r"else\s+if\s*\("),
    re.compile(r"while\s*\("),
    re.compile(r"for\s*\("),
    re.compile(r"case\s+"),
    re.compile(r"catch\s*\("),
    re.compile(r"&&"),
    re.compile(r"\|\|"),
    re.compile(r"\?"),
]

IMPORT_RE = re.compile(r"""import .+ from ['"](.+)['"]""")

TYPE_MAP = {
    "page": "page",
    "screen": "page",
    "view": "page",
    "component": "component",
    "widget": "component",
    "service": "service",
    "api": "service",
    "model": "model",
    "entity": "model",
    "util": "util",
    "helper": "util",
    "config": "config",
    "settings": "config",
}

FOLDERS = {
    "page": "pages",
    "component": "components",
    "service": "services",
    "model": "models",
    "util": "utils",
    "config": "config",
}


def to_pascal_case(name: str) -> str:
    """Convert snake_case, kebab-case or spaced words to PascalCase."""
    parts = re.split(r"[\s_\-]+", name.strip())
    return "".join(p[:1].upper() + p[1:] for p in parts if p)


def extract_dependencies(code: str) -> List[str]:
    """Return the unique non-relative import specifiers in order of appearance."""
    deps: List[str] = []
    for match in IMPORT_RE.finditer(code):
        dep = match.group(1)
        if dep.startswith(".") or dep.startswith("/"):
            continue
        if dep not in deps:
            deps.append(dep)
    return deps


def calculate_complexity(code: str) -> int:
    """McCabe-like estimate: 1 plus every branching construct found."""
    return 1 + sum(len(p.findall(code)) for p in COMPLEXITY_PATTERNS)


def map_component_type(type: str) -> str:
    return TYPE_MAP.get(type.lower(), "component")


def generate_path(name: str, type: str, framework: str = "react") -> str:
    base = "src/app" if framework == "next" else "src"
    folder = FOLDERS.get(map_component_type(type), "components")
    return f"{base}/{folder}/{name}.tsx"


def count_lines(code: str) -> int:
    return len(code.split("\n"))
