from dataclasses import dataclass

from ai_code_reviewer.models.review import ReviewComment, Severity


@dataclass
class ReviewStatistics:
    total_files: int
    total_comments: int
    error_count: int
    warning_count: int
    info_count: int


class DiagnosticsCollection:
    """Review comments per file, as shown to the user.

    One instance is created by the host and passed to whoever publishes or
    reads results.
    """

    def __init__(self):
        self._comments: dict[str, list[ReviewComment]] = {}

    def set(self, path: str, comments: list[ReviewComment]) -> None:
        """Replace the comments for a file; an empty list clears it."""
        if comments:
            self._comments[path] = list(comments)
        else:
            self._comments.pop(path, None)

    def get(self, path: str) -> list[ReviewComment]:
        return list(self._comments.get(path, []))

    def clear(self, path: str) -> None:
        self._comments.pop(path, None)

    def clear_all(self) -> None:
        self._comments.clear()

    def items(self) -> list[tuple[str, list[ReviewComment]]]:
        return [(path, list(comments)) for path, comments in self._comments.items()]

    def count(self, severity: Severity | None = None) -> int:
        return sum(
            1
            for comments in self._comments.values()
            for comment in comments
            if severity is None or comment.severity == severity
        )

    def statistics(self) -> ReviewStatistics:
        return ReviewStatistics(
            total_files=len(self._comments),
            total_comments=self.count(),
            error_count=self.count(Severity.ERROR),
            warning_count=self.count(Severity.WARNING),
            info_count=self.count(Severity.INFO),
        )
