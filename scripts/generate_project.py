#!/usr/bin/env python3
"""
Generate a project from a prompt and write it to disk.
Usage: python scripts/generate_project.py "Dashboard with sales chart" [out_dir]

Requires GROQ_API_KEY in the environment or in .env.
"""
import asyncio
import sys
import uuid
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from orus_builder.core.logging import configure_logging
from orus_builder.core.registry import ServiceRegistry
from orus_builder.generators.codegen.types import GenerationOptions, GenerationRequest
from orus_builder.generators.codegen.writer import project_files, write_files


def run(prompt: str, out_dir: Path) -> int:
    services = ServiceRegistry.default()
    request_id = f"gen-{uuid.uuid4().hex[:12]}"
    request = GenerationRequest(
        request_id=request_id,
        user_id="cli",
        project_id=out_dir.name,
        prompt=prompt,
        options=GenerationOptions(include_tests=True),
    )

    print(f"Generating {request_id}: {prompt}")
    result = asyncio.run(services.generator.generate(request))
    if not result.ok:
        print(f"Generation failed: {result.error.code}")
        print(f"  {result.error.details}")
        return 1

    written = write_files(project_files(result.value), out_dir)
    print(f"Wrote {len(written)} files to {out_dir}")
    for path in written:
        print(f"  {path.relative_to(out_dir)}")
    print(f"Quality score: {result.value.quality_score}")
    return 0


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(2)
    configure_logging()
    target = Path(sys.argv[2]) if len(sys.argv) > 2 else project_root / "generated" / "project"
    sys.exit(run(sys.argv[1], target))
