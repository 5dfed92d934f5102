"""Build log that user-facing step messages are written to."""

from appaloosa_publisher.utils.logging import get_logger

logger = get_logger(__name__)

ERROR_PREFIX = "ERROR: "


class BuildListener:
    """Collects the console output of one build.

    Lines are kept in order so the host can show them next to the build, and
    every line is mirrored to the application log with the build number.
    """

    def __init__(self, build_number: int | None = None):
        self.build_number = build_number
        self._lines: list[str] = []

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    @property
    def text(self) -> str:
        return "\n".join(self._lines)

    def println(self, message: str) -> None:
        """Append a plain line to the build log."""
        self._lines.append(message)
        logger.info("build_log.line", build=self.build_number, message=message)

    def error(self, message: str) -> None:
        """Append an error line to the build log."""
        self._lines.append(f"{ERROR_PREFIX}{message}")
        logger.error("build_log.error", build=self.build_number, message=message)
