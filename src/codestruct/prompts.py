"""Consolidated LLM prompts for CodeStruct.

System instructions are constants; ``build_*`` functions assemble the
user prompt for each dispatcher operation.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol


class PromptFile(Protocol):
    """Anything with a path, content and language tag."""

    path: str
    content: str
    language: str | None


# ── Codebase analysis ─────────────────────────────────────────────

CODEBASE_ANALYSIS_SYSTEM = (
    "You are an expert code analyst. You analyze codebases and give"
    " structured feedback on architecture, issues and improvements."
    " Always respond with a single valid JSON object and nothing else."
)

CODEBASE_OUTPUT_SHAPE = """\
Return JSON with exactly this structure:
{
  "detectedLanguages": {"<language>": <fraction of the codebase, 0-1>},
  "architecture": "<one paragraph describing the overall architecture pattern>",
  "issues": [
    {
      "type": "<short tag, e.g. missing_docs, duplication, unused_import>",
      "severity": "high|medium|low",
      "file": "<relative file path>",
      "description": "<what is wrong>",
      "line": <line number, optional>
    }
  ],
  "suggestions": [
    {
      "type": "<short tag, e.g. refactor, documentation, testing>",
      "title": "<short title>",
      "description": "<detailed description>",
      "file": "<relative file path, optional>",
      "changes": "<proposed change, optional>"
    }
  ]
}

Focus on:
1. Language detection with proportions that sum to 1
2. Architecture pattern identification
3. Code quality issues (missing docs, duplication, unused imports, etc.)
4. Actionable improvement suggestions
5. Best practice violations"""


def build_codebase_prompt(
    files: Sequence[PromptFile],
    *,
    max_listed: int,
    sample_files: int,
    content_chars: int,
) -> str:
    """Embed the file list and truncated samples into the analysis prompt.

    At most ``max_listed`` paths are listed; the first ``sample_files``
    files contribute their first ``content_chars`` characters.
    """
    listed = files[:max_listed]
    file_list = "\n".join(
        f"{f.path} ({f.language or 'unknown'})" for f in listed
    )
    if len(files) > max_listed:
        file_list += f"\n... and {len(files) - max_listed} more files"

    samples = "\n\n".join(
        f"// {f.path}\n{f.content[:content_chars]}"
        for f in files[:sample_files]
    )

    return (
        "Analyze this codebase and provide a comprehensive analysis.\n\n"
        f"Files in project ({len(files)} total):\n{file_list}\n\n"
        f"Sample content from key files:\n{samples}\n\n"
        f"{CODEBASE_OUTPUT_SHAPE}"
    )


# ── Documentation ────────────────────────────────────────────────

DOCUMENTATION_SYSTEM = (
    "You are a documentation expert. Add comprehensive documentation to"
    " code files while preserving all original functionality. Return"
    " only the complete source file, without commentary."
)


def build_documentation_prompt(content: str, path: str) -> str:
    return (
        "Generate comprehensive documentation for this code file.\n\n"
        f"Filename: {path}\n"
        f"Code:\n{content}\n\n"
        "Add:\n"
        "1. Docstring/JSDoc comments for functions and classes\n"
        "2. Inline comments for complex logic\n"
        "3. A file header description\n"
        "4. Parameter and return type documentation\n\n"
        "Return only the enhanced code with documentation added."
    )


# ── Improvement ──────────────────────────────────────────────────

IMPROVEMENT_SYSTEM = (
    "You are a code improvement expert. Enhance code quality while"
    " maintaining functionality. Always respond with a single valid"
    " JSON object and nothing else."
)


def build_improvement_prompt(content: str, path: str) -> str:
    return (
        "Improve this code by fixing issues, adding error handling and"
        " following best practices.\n\n"
        f"Filename: {path}\n"
        f"Code:\n{content}\n\n"
        "Return JSON with this structure:\n"
        "{\n"
        '  "improved": "<the complete improved file>",\n'
        '  "changes": [\n'
        "    {\n"
        '      "type": "addition|modification|removal",\n'
        '      "description": "<what was changed>",\n'
        '      "lineStart": <number, optional>,\n'
        '      "lineEnd": <number, optional>\n'
        "    }\n"
        "  ]\n"
        "}\n\n"
        "Focus on:\n"
        "1. Error handling\n"
        "2. Type safety\n"
        "3. Performance\n"
        "4. Code clarity\n"
        "5. Best practices"
    )


# ── Single-file review ───────────────────────────────────────────

FILE_REVIEW_SYSTEM = (
    "You are an expert code reviewer. Report concrete, line-anchored"
    " issues. Always respond with a single valid JSON object and"
    " nothing else."
)


def build_review_prompt(content: str, path: str) -> str:
    return (
        "Review this code file and list its issues.\n\n"
        f"Filename: {path}\n"
        f"Code:\n{content}\n\n"
        "Return JSON with this structure:\n"
        "{\n"
        '  "summary": "<one or two sentences>",\n'
        '  "issues": [\n'
        "    {\n"
        '      "type": "<short tag>",\n'
        '      "severity": "high|medium|low",\n'
        f'      "file": "{path}",\n'
        '      "description": "<what is wrong>",\n'
        '      "line": <line number, optional>\n'
        "    }\n"
        "  ]\n"
        "}"
    )
