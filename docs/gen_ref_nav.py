"""Generate API reference pages for MkDocs."""

from __future__ import annotations

from pathlib import Path

import mkdocs_gen_files

SRC = Path("src")
PKG = "helperkit"

modules = []
for path in sorted((SRC / PKG).rglob("*.py")):
    if path.name == "__init__.py":
        continue
    modules.append(".".join(path.relative_to(SRC).with_suffix("").parts))


def write_section(fd, title, section_modules):
    """Write one heading with a link per module."""
    if not section_modules:
        return
    print(f"## {title}", file=fd)
    print("", file=fd)
    for mod in section_modules:
        name = mod.split(".")[-1]
        doc_path = f"{mod.replace('.', '/')}.md"
        print(f"- [{name}]({doc_path})", file=fd)
    print("", file=fd)


with mkdocs_gen_files.open("reference/index.md", "w") as fd:
    print("# Reference", file=fd)
    print("", file=fd)
    print("Browse the API by module. Use the search for quick jumps.", file=fd)
    print("", file=fd)

    core_modules = [m for m in modules if m.startswith(f"{PKG}.core")]
    helper_modules = [m for m in modules if m not in core_modules and m != f"{PKG}.cli"]

    write_section(fd, "Cloning Core", core_modules)
    write_section(fd, "Helpers", helper_modules)
    write_section(fd, "Command Line", [m for m in modules if m == f"{PKG}.cli"])

for mod in modules:
    doc_path = f"reference/{mod.replace('.', '/')}.md"

    with mkdocs_gen_files.open(doc_path, "w") as fd:
        print(f"# {mod}", file=fd)
        print("", file=fd)
        print(f"::: {mod}", file=fd)
