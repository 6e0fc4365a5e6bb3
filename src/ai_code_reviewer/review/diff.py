# src/ai_code_reviewer/review/diff.py
from dataclasses import dataclass, field
from pathlib import PurePath
from unidiff import PatchSet


LANGUAGE_BY_SUFFIX = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".py": "python",
    ".java": "java",
    ".cs": "csharp",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".hpp": "cpp",
    ".c": "c",
    ".h": "c",
    ".go": "go",
    ".rs": "rust",
    ".php": "php",
    ".rb": "ruby",
    ".swift": "swift",
    ".kt": "kotlin",
    ".kts": "kotlin",
}


@dataclass
class DiffFile:
    path: str
    diff: str
    is_new: bool
    is_deleted: bool
    added_lines: list[int] = field(default_factory=list)


def split_diff(diff_text: str) -> list[DiffFile]:
    """Split a multi-file unified diff into one entry per file."""
    patch = PatchSet(diff_text)
    files = []

    for patched_file in patch:
        added_lines = []

        for hunk in patched_file:
            for line in hunk:
                if line.is_added and line.target_line_no is not None:
                    added_lines.append(line.target_line_no)

        files.append(DiffFile(
            path=patched_file.path,
            diff=str(patched_file),
            is_new=patched_file.is_added_file,
            is_deleted=patched_file.is_removed_file,
            added_lines=added_lines,
        ))

    return files


def whole_file_diff(path: str, content: str) -> str:
    """Render a whole file as an all-added diff so it can be reviewed without git."""
    body = "\n".join(f"+{line}" for line in content.split("\n"))
    return f"+++ {path}\n{body}"


def language_for_path(path: str) -> str:
    """Guess the language id from the file suffix; 'plaintext' when unknown."""
    return LANGUAGE_BY_SUFFIX.get(PurePath(path).suffix.lower(), "plaintext")
